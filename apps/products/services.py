"""
Product stock service for the Optician Marketplace.

Every write to Product.stock_qty / Product.in_stock goes through here. Decrements
are conditional UPDATEs evaluated against the committed row, so concurrent
confirmations can never drive stock below zero.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from django.db import transaction
from django.db.models import Case, F, Value, When
from django.utils import timezone

from apps.common.types import Err, ErrorCode, Ok, Result, ServiceError
from apps.common.validators import log_security_event

from .models import Product

if TYPE_CHECKING:
    from uuid import UUID

    from django.db.models import QuerySet

logger = logging.getLogger(__name__)


class ProductStockService:
    """📦 Owner of product stock counters"""

    @staticmethod
    def decrement_stock(product_id: UUID | str, quantity: int) -> int:
        """
        Atomically take `quantity` units if at least that many remain.

        Returns the number of rows updated: 1 on success, 0 when stock was short.
        """
        return Product.objects.filter(pk=product_id, stock_qty__gte=quantity).update(
            stock_qty=F("stock_qty") - quantity,
            # SET expressions see the pre-update row
            in_stock=Case(When(stock_qty__gt=quantity, then=Value(True)), default=Value(False)),
            updated_at=timezone.now(),
        )

    @staticmethod
    @transaction.atomic
    def set_stock(product_id: UUID | str, stock_qty: Any, admin_email: str) -> Result[Product, ServiceError]:
        """🔧 Admin direct stock edit"""
        if isinstance(stock_qty, bool) or not isinstance(stock_qty, int) or stock_qty < 0:
            return Err(ServiceError.validation("Stock quantity must be a non-negative integer"))

        try:
            product = Product.objects.select_for_update().get(pk=product_id)
        except Product.DoesNotExist:
            return Err(ServiceError.not_found("Product not found"))

        previous = product.stock_qty
        product.stock_qty = stock_qty
        product.save(update_fields=["stock_qty", "updated_at"])

        log_security_event(
            "stock_adjusted",
            {"product": str(product.id), "from": previous, "to": stock_qty, "admin": admin_email},
        )
        logger.info(f"📦 [Stock] {product.reference}: {previous} → {stock_qty} by {admin_email}")
        return Ok(product)


class ProductCatalogService:
    """🛍️ Catalog reads for opticians"""

    @staticmethod
    def list_active() -> QuerySet[Product]:
        return Product.objects.filter(is_active=True).order_by("name", "id")

    @classmethod
    def get_active(cls, product_id: UUID | str) -> Result[Product, ServiceError]:
        try:
            return Ok(cls.list_active().get(pk=product_id))
        except Product.DoesNotExist:
            return Err(ServiceError(ErrorCode.PRODUCT_NOT_FOUND, "Product not found", {"product_id": str(product_id)}))
