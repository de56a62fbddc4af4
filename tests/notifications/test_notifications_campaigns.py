"""
Tests for admin broadcast campaigns
"""

from unittest.mock import patch

from django.core import mail
from django.test import TestCase, override_settings

from apps.common.types import Err, ErrorCode, Ok
from apps.notifications.models import EmailCampaign, WhatsAppCampaign
from apps.notifications.services import CampaignService
from apps.opticians.models import Optician
from tests.factories.marketplace import create_admin, create_optician


class EmailCampaignTestCase(TestCase):
    def setUp(self):
        self.admin = create_admin()
        self.first = create_optician(email="one@marketplace.test", first_name="Amine", last_name="Alaoui")
        self.second = create_optician(email="two@marketplace.test")
        create_optician(email="pending@marketplace.test", status=Optician.STATUS_PENDING)

    @override_settings(EMAIL_CAMPAIGN_BATCH_SIZE=1)
    def test_sends_to_approved_opticians(self):
        summary = CampaignService.send_email_campaign("Nouveautés", "Line one\nLine two", self.admin).unwrap()

        self.assertEqual((summary.success, summary.failed, summary.attempted), (2, 0, 2))
        self.assertEqual({message.to[0] for message in mail.outbox}, {"one@marketplace.test", "two@marketplace.test"})
        campaign = EmailCampaign.objects.get(pk=summary.campaign_id)
        self.assertEqual((campaign.recipients_count, campaign.sent_count), (2, 2))
        self.assertEqual(campaign.created_by, self.admin)

    def test_content_is_escaped_with_line_breaks(self):
        html = CampaignService.render_campaign_email("<b>Promo</b>\nNow", "Amine")

        self.assertIn("&lt;b&gt;Promo&lt;/b&gt;<br>Now", html)
        self.assertIn("Bonjour Amine", html)

    def test_explicit_recipients(self):
        summary = CampaignService.send_email_campaign("Hello", "Body", self.admin, [self.first.pk]).unwrap()

        self.assertEqual(summary.attempted, 1)
        self.assertEqual(mail.outbox[0].to, ["one@marketplace.test"])

    @patch("apps.notifications.services.EmailService.send_email", side_effect=[True, False])
    def test_failures_are_counted(self, mock_send):
        summary = CampaignService.send_email_campaign("Hello", "Body", self.admin).unwrap()

        self.assertEqual((summary.success, summary.failed), (1, 1))
        self.assertEqual(sum(1 for result in summary.results if not result["ok"]), 1)

    def test_validation(self):
        self.assertEqual(
            CampaignService.send_email_campaign("", "Body", self.admin).unwrap_err().code, ErrorCode.VALIDATION_ERROR
        )
        self.assertEqual(
            CampaignService.send_email_campaign("Subject", "  ", self.admin).unwrap_err().code, ErrorCode.VALIDATION_ERROR
        )

    def test_no_recipients(self):
        Optician.objects.update(status=Optician.STATUS_REJECTED)
        result = CampaignService.send_email_campaign("Subject", "Body", self.admin)
        self.assertEqual(result.unwrap_err().code, ErrorCode.VALIDATION_ERROR)


@override_settings(WHATSAPP_ACCESS_TOKEN="token", WHATSAPP_PHONE_NUMBER_ID="123456")
class WhatsAppCampaignTestCase(TestCase):
    def setUp(self):
        self.admin = create_admin()
        self.with_whatsapp = create_optician(whatsapp="+212600000001")
        self.with_phone = create_optician(phone="+212600000002")
        create_optician()

    @patch("apps.notifications.services.WhatsAppService.send_text")
    def test_sends_to_opticians_with_a_number(self, mock_send):
        mock_send.side_effect = [Ok({"messages": []}), Err("HTTP 400")]

        summary = CampaignService.send_whatsapp_campaign("Promo", self.admin).unwrap()

        self.assertEqual((summary.success, summary.failed, summary.attempted), (1, 1, 2))
        self.assertEqual(
            {call.args[0] for call in mock_send.call_args_list}, {"+212600000001", "+212600000002"}
        )
        campaign = WhatsAppCampaign.objects.get(pk=summary.campaign_id)
        self.assertEqual((campaign.sent_count, campaign.failed_count), (1, 1))

    @override_settings(WHATSAPP_ACCESS_TOKEN="", WHATSAPP_PHONE_NUMBER_ID="")
    def test_unconfigured_is_unexpected_error(self):
        result = CampaignService.send_whatsapp_campaign("Promo", self.admin)
        self.assertEqual(result.unwrap_err().code, ErrorCode.UNEXPECTED_ERROR)
        self.assertFalse(WhatsAppCampaign.objects.exists())
