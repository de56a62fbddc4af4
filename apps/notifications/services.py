"""
Notification services for the Optician Marketplace
Email and WhatsApp delivery, fire-and-forget workflow notifications and
admin broadcast campaigns.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any, Protocol

import requests
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.db import transaction
from django.template.loader import render_to_string

from apps.common.queue import queue_by_name
from apps.common.types import Err, Ok, Result, ServiceError
from apps.common.validators import MAX_MESSAGE_LENGTH, MAX_SUBJECT_LENGTH

from .models import EmailCampaign, WhatsAppCampaign

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from apps.opticians.models import Optician
    from apps.users.models import User

logger = logging.getLogger(__name__)

CAMPAIGN_PREVIEW_LENGTH = 120
MAX_CAMPAIGN_CONTENT_LENGTH = 20000

# ===============================================================================
# CHANNELS
# ===============================================================================


class EmailService:
    """📧 Thin wrapper over Django's email backend"""

    @staticmethod
    def send_email(recipient: str, subject: str, body: str, html_body: str | None = None) -> bool:
        """Send one email; failures are logged and reported as False"""
        try:
            email = EmailMultiAlternatives(
                subject=subject,
                body=body,
                from_email=settings.DEFAULT_FROM_EMAIL,
                to=[recipient],
            )
            if html_body:
                email.attach_alternative(html_body, "text/html")
            email.send(fail_silently=False)
            logger.info(f"📧 [Email] Successfully sent email to {recipient}: {subject}")
            return True
        except Exception as e:
            logger.error(f"🔥 [Email] Failed to send email to {recipient}: {e}")
            return False


def normalize_whatsapp_number(number: str) -> str:
    """Digits only, as the Cloud API expects (no '+', spaces or dashes)"""
    return re.sub(r"\D", "", number or "")


class WhatsAppService:
    """💬 WhatsApp Cloud API client"""

    @staticmethod
    def is_configured() -> bool:
        return bool(settings.WHATSAPP_ACCESS_TOKEN and settings.WHATSAPP_PHONE_NUMBER_ID)

    @staticmethod
    def messages_url() -> str:
        return (
            f"https://graph.facebook.com/{settings.WHATSAPP_API_VERSION}/"
            f"{settings.WHATSAPP_PHONE_NUMBER_ID}/messages"
        )

    @classmethod
    def send_text(cls, to: str, body: str) -> Result[dict[str, Any], str]:
        """Send a plain text message; returns the API payload or an error string"""
        if not cls.is_configured():
            return Err("WhatsApp is not configured: set WHATSAPP_ACCESS_TOKEN and WHATSAPP_PHONE_NUMBER_ID")

        number = normalize_whatsapp_number(to)
        if not number:
            return Err("Missing WhatsApp number")

        payload = {
            "messaging_product": "whatsapp",
            "to": number,
            "type": "text",
            "text": {"body": body},
        }
        try:
            response = requests.post(
                cls.messages_url(),
                json=payload,
                headers={"Authorization": f"Bearer {settings.WHATSAPP_ACCESS_TOKEN}"},
                timeout=settings.EXTERNAL_HTTP_TIMEOUT,
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"🔌 [WhatsApp] Request to {number} failed: {e}")
            return Err(str(e))

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            logger.warning(f"⚠️ [WhatsApp] HTTP {response.status_code} for {number}: {data}")
            return Err(f"HTTP {response.status_code}")

        logger.info(f"💬 [WhatsApp] Message sent to {number}")
        return Ok(data)


# ===============================================================================
# WORKFLOW NOTIFICATIONS
# ===============================================================================


class Notifier(Protocol):
    """One-way channel the state machines use to announce transitions"""

    def notify_admin(self, subject: str, message: str, metadata: dict[str, Any] | None = None) -> None: ...

    def notify_optician(self, optician_id: UUID | str, subject: str, message: str) -> None: ...


class QueuedNotifier:
    """
    Default notifier.

    Dispatch is deferred until the surrounding transaction commits and handed to
    django-q; a rolled-back transition never notifies, and a dispatch failure is
    logged without reaching the caller.
    """

    ADMIN_TASK = "apps.notifications.tasks.send_admin_alert_task"
    OPTICIAN_TASK = "apps.notifications.tasks.send_optician_notification_task"

    def notify_admin(self, subject: str, message: str, metadata: dict[str, Any] | None = None) -> None:
        transaction.on_commit(partial(self._enqueue, self.ADMIN_TASK, subject, message, metadata or {}))

    def notify_optician(self, optician_id: UUID | str, subject: str, message: str) -> None:
        transaction.on_commit(partial(self._enqueue, self.OPTICIAN_TASK, str(optician_id), subject, message))

    @staticmethod
    def _enqueue(task_path: str, *args: Any) -> None:
        try:
            queue_by_name(task_path, *args)
        except Exception as e:
            logger.error(f"🔥 [Notification] Could not dispatch {task_path}: {e}")


def get_notifier() -> Notifier:
    return QueuedNotifier()


class NotificationService:
    """🔔 Delivers workflow notifications over every configured channel"""

    @staticmethod
    def send_admin_alert(subject: str, message: str, metadata: dict[str, Any] | None = None) -> bool:
        body = message
        if metadata:
            body += "\n\n" + "\n".join(f"- {key}: {value}" for key, value in metadata.items())

        delivered = False
        admin_email = settings.ADMIN_NOTIFICATION_EMAIL
        if admin_email:
            delivered = EmailService.send_email(admin_email, subject, body) or delivered

        if settings.ADMIN_WHATSAPP_NUMBER and WhatsAppService.is_configured():
            delivered = WhatsAppService.send_text(settings.ADMIN_WHATSAPP_NUMBER, f"{subject}\n\n{body}").is_ok() or delivered

        if not delivered:
            logger.warning(f"⚠️ [Notification] Admin alert not delivered: {subject}")
        return delivered

    @staticmethod
    def send_optician_notification(optician: Optician, subject: str, message: str) -> bool:
        delivered = False
        if optician.user.email:
            delivered = EmailService.send_email(optician.user.email, subject, message) or delivered
        if optician.contact_number and WhatsAppService.is_configured():
            delivered = WhatsAppService.send_text(optician.contact_number, message).is_ok() or delivered
        return delivered


# ===============================================================================
# CAMPAIGNS
# ===============================================================================


@dataclass
class CampaignSummary:
    """Outcome of a broadcast"""

    campaign_id: str
    success: int
    failed: int
    attempted: int
    results: list[dict[str, Any]]

    def as_dict(self) -> dict[str, Any]:
        return {
            "campaign_id": self.campaign_id,
            "success": self.success,
            "failed": self.failed,
            "attempted": self.attempted,
            "results": self.results,
        }


class CampaignService:
    """📣 Admin broadcasts to opticians"""

    @staticmethod
    def _recipients(recipient_ids: Iterable[UUID | str] | None) -> list[Optician]:
        from apps.opticians.models import Optician  # noqa: PLC0415

        queryset = Optician.objects.select_related("user").order_by("-created_at")
        ids = list(recipient_ids or [])
        if ids:
            return list(queryset.filter(pk__in=ids))
        return list(queryset.filter(status=Optician.STATUS_APPROVED))

    @staticmethod
    def render_campaign_email(content: str, recipient_name: str = "") -> str:
        return render_to_string(
            "notifications/campaign_email.html",
            {"content": content, "preview": content[:CAMPAIGN_PREVIEW_LENGTH], "recipient_name": recipient_name},
        )

    @classmethod
    def send_email_campaign(
        cls,
        subject: str,
        content: str,
        creator: User | None,
        recipient_ids: Iterable[UUID | str] | None = None,
    ) -> Result[CampaignSummary, ServiceError]:
        """
        Email every targeted optician.

        Content is plain text: it is HTML-escaped and newlines become <br>.
        Recipients are processed in batches of EMAIL_CAMPAIGN_BATCH_SIZE.
        """
        subject = (subject or "").strip()
        content = (content or "").strip()
        if not subject or len(subject) > MAX_SUBJECT_LENGTH:
            return Err(ServiceError.validation("Subject is required", field="subject"))
        if not content or len(content) > MAX_CAMPAIGN_CONTENT_LENGTH:
            return Err(ServiceError.validation("Content is required", field="content"))

        recipients = [optician for optician in cls._recipients(recipient_ids) if optician.user.email]
        if not recipients:
            return Err(ServiceError.validation("No email recipients found"))

        batch_size = max(int(settings.EMAIL_CAMPAIGN_BATCH_SIZE), 1)
        results: list[dict[str, Any]] = []
        for start in range(0, len(recipients), batch_size):
            logger.debug(f"📧 [Campaign] Batch {start // batch_size + 1}: {min(batch_size, len(recipients) - start)} recipients")
            for optician in recipients[start : start + batch_size]:
                email = optician.user.email
                html = cls.render_campaign_email(content, optician.full_name or optician.business_name)
                ok = EmailService.send_email(email, subject, content, html)
                results.append({"email": email, "ok": ok} if ok else {"email": email, "ok": False, "error": "send failed"})

        sent = sum(1 for result in results if result["ok"])
        campaign = EmailCampaign.objects.create(
            created_by=creator,
            subject=subject,
            content=content,
            recipients_count=len(recipients),
            sent_count=sent,
            failed_count=len(results) - sent,
        )
        logger.info(f"📣 [Campaign] Email '{subject}' sent to {sent}/{len(recipients)} opticians")
        return Ok(CampaignSummary(str(campaign.id), sent, len(results) - sent, len(recipients), results))

    @classmethod
    def send_whatsapp_campaign(
        cls,
        message: str,
        creator: User | None,
        recipient_ids: Iterable[UUID | str] | None = None,
    ) -> Result[CampaignSummary, ServiceError]:
        """WhatsApp every targeted optician that has a WhatsApp number"""
        message = (message or "").strip()
        if not message or len(message) > MAX_MESSAGE_LENGTH:
            return Err(ServiceError.validation("Message is required", field="message"))
        if not WhatsAppService.is_configured():
            return Err(
                ServiceError.unexpected(
                    "WhatsApp is not configured: set WHATSAPP_ACCESS_TOKEN and WHATSAPP_PHONE_NUMBER_ID"
                )
            )

        recipients = [optician for optician in cls._recipients(recipient_ids) if optician.contact_number]
        results: list[dict[str, Any]] = []
        for optician in recipients:
            outcome = WhatsAppService.send_text(optician.contact_number, message)
            if outcome.is_ok():
                results.append({"id": str(optician.id), "to": optician.contact_number, "ok": True})
            else:
                results.append({"id": str(optician.id), "to": optician.contact_number, "ok": False, "error": outcome.unwrap_err()})

        sent = sum(1 for result in results if result["ok"])
        campaign = WhatsAppCampaign.objects.create(
            created_by=creator,
            message=message,
            recipients_count=len(recipients),
            sent_count=sent,
            failed_count=len(results) - sent,
        )
        logger.info(f"📣 [Campaign] WhatsApp broadcast sent to {sent}/{len(recipients)} opticians")
        return Ok(CampaignSummary(str(campaign.id), sent, len(results) - sent, len(recipients), results))
