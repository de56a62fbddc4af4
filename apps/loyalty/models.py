"""
Loyalty program models for the Optician Marketplace
Redeemable rewards and optician redemption requests with item snapshots.
"""

from __future__ import annotations

import uuid
from typing import ClassVar

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

# ===============================================================================
# REDEMPTION STATUS
# ===============================================================================


class RedemptionStatus(models.TextChoices):
    PENDING = "PENDING", _("Pending")
    APPROVED = "APPROVED", _("Approved")
    REJECTED = "REJECTED", _("Rejected")


REDEMPTION_TRANSITIONS: dict[str, frozenset[str]] = {
    RedemptionStatus.PENDING: frozenset({RedemptionStatus.APPROVED, RedemptionStatus.REJECTED}),
    RedemptionStatus.APPROVED: frozenset(),
    RedemptionStatus.REJECTED: frozenset(),
}


def can_transition_redemption(current: str, target: str) -> bool:
    """APPROVED and REJECTED are terminal"""
    return target in REDEMPTION_TRANSITIONS.get(current, frozenset())


# ===============================================================================
# REWARD CATALOG
# ===============================================================================


class LoyaltyProduct(models.Model):
    """🎁 Reward opticians can redeem with points"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    points_cost = models.PositiveIntegerField(validators=[MinValueValidator(1)], help_text=_("Points per unit"))
    image_url = models.URLField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True)
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="loyalty_products",
        help_text=_("Physical product backing this reward; empty means always available"),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "loyalty_products"
        verbose_name = _("Loyalty Product")
        verbose_name_plural = _("Loyalty Products")
        ordering: ClassVar = ["points_cost", "name"]
        constraints: ClassVar = [
            models.CheckConstraint(condition=models.Q(points_cost__gt=0), name="loyalty_product_cost_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.points_cost} pts)"


# ===============================================================================
# REDEMPTIONS
# ===============================================================================


class LoyaltyRedemption(models.Model):
    """
    An optician's request to exchange points for rewards.

    Created PENDING without touching the balance; an admin approves (points are
    debited) or rejects it exactly once.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    optician = models.ForeignKey("opticians.Optician", on_delete=models.PROTECT, related_name="redemptions")
    total_points = models.PositiveIntegerField(help_text=_("Server-computed sum of item totals"))
    status = models.CharField(max_length=20, choices=RedemptionStatus.choices, default=RedemptionStatus.PENDING)

    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.CharField(max_length=254, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.CharField(max_length=254, blank=True)
    rejection_reason = models.CharField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "loyalty_redemptions"
        verbose_name = _("Loyalty Redemption")
        verbose_name_plural = _("Loyalty Redemptions")
        ordering: ClassVar = ["-created_at"]
        indexes: ClassVar = [
            models.Index(fields=["status", "-created_at"]),
            models.Index(fields=["optician", "-created_at"]),
        ]

    def __str__(self) -> str:
        return f"Redemption {self.pk} - {self.total_points} pts ({self.status})"


class LoyaltyRedemptionItem(models.Model):
    """Snapshot of a reward line at request time"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    redemption = models.ForeignKey(LoyaltyRedemption, on_delete=models.CASCADE, related_name="items")
    loyalty_product = models.ForeignKey(
        LoyaltyProduct, on_delete=models.SET_NULL, null=True, blank=True, related_name="redemption_items"
    )

    # Snapshot fields (immutable after creation)
    product_name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    points_cost = models.PositiveIntegerField()
    total_points = models.PositiveIntegerField()
    image_url = models.URLField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "loyalty_redemption_items"
        verbose_name = _("Loyalty Redemption Item")
        verbose_name_plural = _("Loyalty Redemption Items")
        ordering: ClassVar = ["created_at"]

    def __str__(self) -> str:
        return f"{self.quantity} × {self.product_name}"
