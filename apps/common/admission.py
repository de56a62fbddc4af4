"""
Balance and stock admission checks.

Pure predicates shared by the redemption and order workflows. They are evaluated
once when a request is created and again, against freshly locked rows, when an
admin finalizes it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from apps.loyalty.models import LoyaltyProduct


def can_afford_redemption(optician_balance: int, requested_total_points: int) -> bool:
    return optician_balance >= requested_total_points


def is_redeemable(loyalty_product: LoyaltyProduct) -> bool:
    """Inactive rewards are never redeemable; stock-backed rewards follow their product."""
    if not loyalty_product.is_active:
        return False
    if loyalty_product.product_id is not None:
        return bool(loyalty_product.product.in_stock)
    return True


def can_fulfill_order_item(product_stock_qty: int, requested_qty: int) -> bool:
    return product_stock_qty >= requested_qty


def insufficient_stock_message(available: int, requested: int) -> str:
    return f"insufficient stock: available {available}, requested {requested}"
