"""
Tests for notification delivery channels and deferred dispatch
"""

from unittest.mock import MagicMock, patch

import requests
from django.core import mail
from django.db import transaction
from django.test import SimpleTestCase, TestCase, override_settings

from apps.notifications.services import (
    EmailService,
    NotificationService,
    QueuedNotifier,
    WhatsAppService,
    normalize_whatsapp_number,
)
from apps.notifications.tasks import send_admin_alert_task, send_optician_notification_task
from tests.factories.marketplace import create_optician

WHATSAPP_CONFIGURED = {
    "WHATSAPP_ACCESS_TOKEN": "token",
    "WHATSAPP_PHONE_NUMBER_ID": "123456",
    "WHATSAPP_API_VERSION": "v20.0",
}


def graph_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = payload or {}
    return response


class WhatsAppServiceTestCase(SimpleTestCase):
    def test_number_normalization(self):
        self.assertEqual(normalize_whatsapp_number("+212 6-00 00 00 01"), "212600000001")
        self.assertEqual(normalize_whatsapp_number(""), "")

    @override_settings(WHATSAPP_ACCESS_TOKEN="", WHATSAPP_PHONE_NUMBER_ID="")
    def test_unconfigured_is_an_error(self):
        self.assertTrue(WhatsAppService.send_text("+212600000001", "hi").is_err())

    @override_settings(**WHATSAPP_CONFIGURED)
    @patch("apps.notifications.services.requests.post")
    def test_send_text_payload(self, mock_post):
        mock_post.return_value = graph_response(payload={"messages": [{"id": "wamid.1"}]})

        result = WhatsAppService.send_text("+212 600000001", "Bonjour")

        self.assertTrue(result.is_ok())
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], "https://graph.facebook.com/v20.0/123456/messages")
        self.assertEqual(
            kwargs["json"],
            {"messaging_product": "whatsapp", "to": "212600000001", "type": "text", "text": {"body": "Bonjour"}},
        )
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer token")

    @override_settings(**WHATSAPP_CONFIGURED)
    @patch("apps.notifications.services.requests.post")
    def test_http_and_network_failures(self, mock_post):
        mock_post.return_value = graph_response(status_code=401)
        self.assertEqual(WhatsAppService.send_text("212600000001", "x").unwrap_err(), "HTTP 401")

        mock_post.side_effect = requests.exceptions.Timeout("slow")
        self.assertTrue(WhatsAppService.send_text("212600000001", "x").is_err())


class EmailServiceTestCase(SimpleTestCase):
    def test_send_with_html_alternative(self):
        self.assertTrue(EmailService.send_email("a@b.test", "Subject", "Body", "<p>Body</p>"))
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].alternatives[0][1], "text/html")


class QueuedNotifierTestCase(TestCase):
    @patch("apps.notifications.services.queue_by_name")
    def test_dispatch_waits_for_commit(self, mock_queue):
        notifier = QueuedNotifier()

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            with transaction.atomic():
                notifier.notify_admin("New order", "details", {"order_id": "1"})
                mock_queue.assert_not_called()

        self.assertEqual(len(callbacks), 1)
        mock_queue.assert_called_once_with(QueuedNotifier.ADMIN_TASK, "New order", "details", {"order_id": "1"})

    @patch("apps.notifications.services.queue_by_name")
    def test_rolled_back_transition_never_notifies(self, mock_queue):
        notifier = QueuedNotifier()

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            try:
                with transaction.atomic():
                    notifier.notify_optician("abc", "Approved", "ok")
                    raise RuntimeError("rollback")
            except RuntimeError:
                pass

        self.assertEqual(callbacks, [])
        mock_queue.assert_not_called()

    @patch("apps.notifications.services.queue_by_name", side_effect=ConnectionError("broker down"))
    def test_dispatch_failure_is_swallowed(self, mock_queue):
        with self.captureOnCommitCallbacks(execute=True):
            QueuedNotifier().notify_optician("abc", "Approved", "ok")

        mock_queue.assert_called_once()


class NotificationTasksTestCase(TestCase):
    @override_settings(ADMIN_NOTIFICATION_EMAIL="ops@marketplace.test", ADMIN_WHATSAPP_NUMBER="")
    def test_admin_alert_by_email(self):
        self.assertTrue(send_admin_alert_task("New redemption", "250 points", {"redemption_id": "r1"}))
        self.assertEqual(mail.outbox[0].to, ["ops@marketplace.test"])
        self.assertIn("redemption_id: r1", mail.outbox[0].body)

    @override_settings(ADMIN_NOTIFICATION_EMAIL="", ADMIN_WHATSAPP_NUMBER="")
    def test_admin_alert_without_channels(self):
        self.assertFalse(NotificationService.send_admin_alert("Subject", "Body"))

    def test_optician_notification_by_email(self):
        optician = create_optician(email="atlas@marketplace.test")
        self.assertTrue(send_optician_notification_task(str(optician.pk), "Approved", "Your order is confirmed"))
        self.assertEqual(mail.outbox[0].to, ["atlas@marketplace.test"])

    def test_missing_optician(self):
        optician = create_optician()
        optician_id = str(optician.pk)
        optician.delete()
        self.assertFalse(send_optician_notification_task(optician_id, "Approved", "ok"))
