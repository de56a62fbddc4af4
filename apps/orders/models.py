"""
Order Management models for the Optician Marketplace
Optician purchase orders with per-line review and price snapshots.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any, ClassVar

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

# ===============================================================================
# STATUS VARIANTS
# ===============================================================================


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", _("Pending")
    APPROVED = "APPROVED", _("Approved")
    CANCELLED = "CANCELLED", _("Cancelled")


class OrderSource(models.TextChoices):
    OPTICIAN = "OPTICIAN", _("Submitted by optician")
    MANUAL = "MANUAL", _("Entered by administrator")


class OrderItemStatus(models.TextChoices):
    PENDING = "PENDING", _("Pending")
    CONFIRMED = "CONFIRMED", _("Confirmed")
    CANCELLED = "CANCELLED", _("Cancelled")


ORDER_ITEM_TRANSITIONS: dict[str, frozenset[str]] = {
    OrderItemStatus.PENDING: frozenset({OrderItemStatus.CONFIRMED, OrderItemStatus.CANCELLED}),
    OrderItemStatus.CONFIRMED: frozenset(),
    OrderItemStatus.CANCELLED: frozenset(),
}


def can_transition_item(current: str, target: str) -> bool:
    """CONFIRMED and CANCELLED are terminal"""
    return target in ORDER_ITEM_TRANSITIONS.get(current, frozenset())


# ===============================================================================
# ORDER MANAGEMENT MODELS
# ===============================================================================


class Order(models.Model):
    """
    Purchase order for an optician.
    Lines are reviewed independently; the order itself carries totals and source.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=50, unique=True, help_text=_("Human-readable order number"))
    optician = models.ForeignKey("opticians.Optician", on_delete=models.PROTECT, related_name="orders")

    status = models.CharField(max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING)
    source = models.CharField(max_length=20, choices=OrderSource.choices, default=OrderSource.OPTICIAN)
    currency = models.CharField(max_length=3, default="EUR")
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00"), validators=[MinValueValidator(Decimal("0.00"))]
    )
    note = models.TextField(blank=True)

    validated_at = models.DateTimeField(null=True, blank=True, help_text=_("When an admin approved the order"))
    created_by = models.CharField(max_length=254, blank=True, help_text=_("Email of the user who entered the order"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "orders"
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        ordering: ClassVar[tuple[str, ...]] = ("-created_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["optician", "-created_at"]),
            models.Index(fields=["status", "-created_at"]),
        )

    def __str__(self) -> str:
        return f"Order {self.order_number} - {self.total_amount} {self.currency}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        """Auto-generate order number before saving"""
        if not self.order_number:
            self.order_number = f"ORD-{timezone.now():%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"
        super().save(*args, **kwargs)

    @property
    def short_id(self) -> str:
        return str(self.id)[:8]


class OrderItem(models.Model):
    """
    Order line with a price snapshot taken when the order was entered.
    Each line is confirmed or cancelled on its own.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "products.Product", on_delete=models.SET_NULL, null=True, blank=True, related_name="order_items"
    )

    # Snapshot fields (immutable after creation)
    product_name = models.CharField(max_length=200)
    product_reference = models.CharField(max_length=100)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    sale_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    discount_pct = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    line_total = models.DecimalField(max_digits=12, decimal_places=2)

    status = models.CharField(max_length=20, choices=OrderItemStatus.choices, default=OrderItemStatus.PENDING)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    confirmed_by = models.CharField(max_length=254, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "order_items"
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")
        ordering: ClassVar[tuple[str, ...]] = ("created_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (models.Index(fields=["order", "status"]),)

    def __str__(self) -> str:
        return f"{self.quantity} × {self.product_name} ({self.status})"
