"""
Optician models for the Optician Marketplace
Professional accounts, their loyalty balance and its history.
"""

from __future__ import annotations

import uuid
from typing import ClassVar

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

# ===============================================================================
# OPTICIAN
# ===============================================================================


class Optician(models.Model):
    """
    Professional optician account.

    `loyalty_points` is written only by LoyaltyPointsService; everything else
    reads it.
    """

    STATUS_PENDING = "PENDING"
    STATUS_APPROVED = "APPROVED"
    STATUS_REJECTED = "REJECTED"

    STATUS_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        (STATUS_PENDING, _("Pending review")),
        (STATUS_APPROVED, _("Approved")),
        (STATUS_REJECTED, _("Rejected")),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="optician")

    # Business identity
    business_name = models.CharField(max_length=200)
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    whatsapp = models.CharField(max_length=30, blank=True, help_text=_("WhatsApp number in international format"))

    # Location
    address = models.CharField(max_length=300, blank=True, help_text=_("Street address or Plus Code"))
    city = models.CharField(max_length=100, blank=True)
    postal_code = models.CharField(max_length=20, blank=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    approved_at = models.DateTimeField(null=True, blank=True)

    loyalty_points = models.PositiveIntegerField(default=0, help_text=_("Current loyalty balance"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "opticians"
        verbose_name = _("Optician")
        verbose_name_plural = _("Opticians")
        ordering: ClassVar = ["business_name"]
        indexes: ClassVar = [
            models.Index(fields=["status"]),
            models.Index(fields=["city"]),
        ]
        constraints: ClassVar = [
            models.CheckConstraint(
                condition=models.Q(loyalty_points__gte=0),
                name="optician_loyalty_points_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return self.business_name

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_approved(self) -> bool:
        return self.status == self.STATUS_APPROVED

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def contact_number(self) -> str:
        return self.whatsapp or self.phone


# ===============================================================================
# LOYALTY POINTS HISTORY
# ===============================================================================


class LoyaltyPointsTransaction(models.Model):
    """📒 Append-only record of every loyalty balance change"""

    TYPE_EARNED = "EARNED"
    TYPE_REDEEMED = "REDEEMED"
    TYPE_ADJUSTED = "ADJUSTED"
    TYPE_BONUS = "BONUS"

    TRANSACTION_TYPE_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        (TYPE_EARNED, _("Earned")),
        (TYPE_REDEEMED, _("Redeemed")),
        (TYPE_ADJUSTED, _("Adjusted")),
        (TYPE_BONUS, _("Bonus")),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    optician = models.ForeignKey(Optician, on_delete=models.CASCADE, related_name="points_transactions")
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPE_CHOICES)
    points = models.IntegerField(help_text=_("Signed change applied to the balance"))
    balance_after = models.PositiveIntegerField()
    description = models.CharField(max_length=255, blank=True)
    reference = models.CharField(
        max_length=100, blank=True, help_text=_("Source of the change, e.g. 'redemption:<id>'")
    )
    created_by = models.CharField(max_length=254, blank=True, help_text=_("Email of the acting admin"))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "loyalty_points_transactions"
        verbose_name = _("Loyalty Points Transaction")
        verbose_name_plural = _("Loyalty Points Transactions")
        ordering: ClassVar = ["-created_at"]
        indexes: ClassVar = [
            models.Index(fields=["optician", "-created_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.optician_id}: {self.points:+d} ({self.transaction_type})"
