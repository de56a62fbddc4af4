"""
Product Catalog models for the Optician Marketplace
Eyewear products opticians can order, with stock and loyalty reward configuration.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any, ClassVar

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Product(models.Model):
    """
    Catalog entry for a physical eyewear product.

    `stock_qty` and `in_stock` are written only by ProductStockService so the
    pair always satisfies `in_stock == (stock_qty > 0)`.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Basic Information
    name = models.CharField(max_length=200, help_text=_("Display name for opticians"))
    reference = models.CharField(max_length=100, unique=True, help_text=_("Supplier reference / SKU"))
    description = models.TextField(blank=True)
    brand = models.CharField(max_length=100, blank=True)
    image_url = models.URLField(max_length=500, blank=True)

    # Pricing
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("List price"),
    )
    sale_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Active promotional price; preferred over list price when set"),
    )
    first_order_discount_pct = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        help_text=_("Discount percentage offered on a first order"),
    )

    # Stock
    stock_qty = models.PositiveIntegerField(default=0, help_text=_("Units available"))
    in_stock = models.BooleanField(default=False, help_text=_("Derived: stock_qty > 0"))

    # Loyalty
    loyalty_points_reward = models.PositiveIntegerField(
        default=0, help_text=_("Points earned per unit when an order line is confirmed")
    )

    is_active = models.BooleanField(default=True, help_text=_("Whether product is available for ordering"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "products"
        verbose_name = _("Product")
        verbose_name_plural = _("Products")
        ordering: ClassVar = ["name"]
        indexes: ClassVar = [
            models.Index(fields=["is_active", "in_stock"]),
        ]
        constraints: ClassVar = [
            models.CheckConstraint(
                condition=models.Q(stock_qty__gte=0),
                name="product_stock_qty_non_negative",
            ),
            models.CheckConstraint(
                condition=(models.Q(stock_qty__gt=0, in_stock=True) | models.Q(stock_qty=0, in_stock=False)),
                name="product_in_stock_matches_qty",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.reference})"

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.in_stock = self.stock_qty > 0
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "stock_qty" in update_fields:
            kwargs["update_fields"] = {*update_fields, "in_stock"}
        super().save(*args, **kwargs)

    @property
    def effective_price(self) -> Decimal:
        """Sale price when one is set, otherwise list price"""
        return self.sale_price if self.sale_price is not None else self.price
