"""
Django admin for notifications app.
Campaign history (read-only).
"""

from __future__ import annotations

from typing import ClassVar

from django.contrib import admin
from django.http import HttpRequest

from .models import EmailCampaign, WhatsAppCampaign


class CampaignAdminBase(admin.ModelAdmin):
    list_filter: ClassVar[tuple[str, ...]] = ("created_at",)
    readonly_fields: ClassVar[tuple[str, ...]] = (
        "created_by", "target_role", "recipients_count", "sent_count", "failed_count", "created_at"
    )

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False


@admin.register(EmailCampaign)
class EmailCampaignAdmin(CampaignAdminBase):
    list_display: ClassVar[tuple[str, ...]] = ("subject", "recipients_count", "sent_count", "failed_count", "created_at")
    search_fields: ClassVar[tuple[str, ...]] = ("subject",)


@admin.register(WhatsAppCampaign)
class WhatsAppCampaignAdmin(CampaignAdminBase):
    list_display: ClassVar[tuple[str, ...]] = ("message", "recipients_count", "sent_count", "failed_count", "created_at")
    search_fields: ClassVar[tuple[str, ...]] = ("message",)
