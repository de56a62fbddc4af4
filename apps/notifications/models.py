"""
Notification models for the Optician Marketplace
Records of admin broadcast campaigns.
"""

from __future__ import annotations

import uuid
from typing import ClassVar

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class CampaignBase(models.Model):
    """Shared delivery bookkeeping for broadcast campaigns"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="+",
    )
    target_role = models.CharField(max_length=20, default="OPTICIAN")
    recipients_count = models.PositiveIntegerField(default=0)
    sent_count = models.PositiveIntegerField(default=0)
    failed_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering: ClassVar = ["-created_at"]


class EmailCampaign(CampaignBase):
    """📧 Email broadcast sent to opticians"""

    subject = models.CharField(max_length=200)
    content = models.TextField(help_text=_("Plain text body; escaped before rendering"))

    class Meta(CampaignBase.Meta):
        db_table = "email_campaigns"
        verbose_name = _("Email Campaign")
        verbose_name_plural = _("Email Campaigns")

    def __str__(self) -> str:
        return f"📧 {self.subject} ({self.sent_count}/{self.recipients_count})"


class WhatsAppCampaign(CampaignBase):
    """💬 WhatsApp broadcast sent to opticians"""

    message = models.TextField()

    class Meta(CampaignBase.Meta):
        db_table = "whatsapp_campaigns"
        verbose_name = _("WhatsApp Campaign")
        verbose_name_plural = _("WhatsApp Campaigns")

    def __str__(self) -> str:
        return f"💬 {self.message[:40]} ({self.sent_count}/{self.recipients_count})"
