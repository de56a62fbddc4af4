"""
Order services for the Optician Marketplace.

Order lines move PENDING → CONFIRMED | CANCELLED independently. Confirming a
line takes stock with a conditional UPDATE in the same transaction as the
status write. Manual orders entered by an admin are validated as a whole before
anything is written and are created already approved.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.common.admission import can_fulfill_order_item, insufficient_stock_message
from apps.common.types import Err, ErrorCode, Ok, Result, ServiceAbort, ServiceError
from apps.common.validators import MAX_ITEMS_PER_REQUEST, MAX_NOTE_LENGTH
from apps.notifications.services import Notifier, get_notifier, normalize_whatsapp_number
from apps.opticians.models import LoyaltyPointsTransaction, Optician
from apps.opticians.services import LoyaltyPointsService
from apps.products.models import Product
from apps.products.services import ProductStockService

from .models import Order, OrderItem, OrderItemStatus, OrderSource, OrderStatus, can_transition_item

if TYPE_CHECKING:
    from uuid import UUID

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderLineRequest:
    product_id: uuid.UUID
    quantity: int


@dataclass(frozen=True)
class OrderLineSnapshot:
    """📸 Catalog data frozen onto an order line"""

    product: Product
    product_name: str
    product_reference: str
    unit_price: Decimal
    sale_price: Decimal | None
    discount_pct: Decimal | None
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @classmethod
    def capture(cls, product: Product, quantity: int) -> OrderLineSnapshot:
        return cls(
            product=product,
            product_name=product.name,
            product_reference=product.reference,
            unit_price=product.effective_price,
            sale_price=product.sale_price,
            discount_pct=product.first_order_discount_pct,
            quantity=quantity,
        )

    def to_item(self, order: Order, **extra: Any) -> OrderItem:
        return OrderItem(
            order=order,
            product=self.product,
            product_name=self.product_name,
            product_reference=self.product_reference,
            unit_price=self.unit_price,
            sale_price=self.sale_price,
            discount_pct=self.discount_pct,
            quantity=self.quantity,
            line_total=self.line_total,
            **extra,
        )


def _parse_lines(items: Any) -> Result[list[OrderLineRequest], ServiceError]:
    """Validate `[{product_id, quantity}]` request lines"""
    if not isinstance(items, list) or not items:
        return Err(ServiceError.validation("No items in order"))
    if len(items) > MAX_ITEMS_PER_REQUEST:
        return Err(ServiceError.validation(f"At most {MAX_ITEMS_PER_REQUEST} items per order"))

    lines: list[OrderLineRequest] = []
    for item in items:
        try:
            product_id = uuid.UUID(str(item["product_id"]))
        except (KeyError, TypeError, ValueError):
            return Err(ServiceError.validation("Invalid product id", field="product_id"))
        quantity = item.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            return Err(ServiceError.validation("Quantity must be a positive integer", field="quantity"))
        lines.append(OrderLineRequest(product_id, quantity))
    return Ok(lines)


def _aggregate_demand(lines: list[OrderLineRequest]) -> dict[uuid.UUID, int]:
    demand: dict[uuid.UUID, int] = {}
    for line in lines:
        demand[line.product_id] = demand.get(line.product_id, 0) + line.quantity
    return demand


def _insufficient_stock(product: Product, available: int, requested: int) -> ServiceError:
    return ServiceError(
        ErrorCode.INSUFFICIENT_STOCK,
        insufficient_stock_message(available, requested),
        {"product": product.name, "product_id": str(product.id), "available": available, "requested": requested},
    )


class OrderService:
    """🛒 Order lifecycle"""

    # ===========================================================================
    # OPTICIAN SUBMISSION
    # ===========================================================================

    @classmethod
    def submit_order(
        cls,
        optician: Optician,
        items: list[dict[str, Any]],
        note: str = "",
        notifier: Notifier | None = None,
    ) -> Result[Order, ServiceError]:
        """Create a PENDING order with PENDING lines for the admin to review"""
        if not optician.is_approved:
            return Err(ServiceError(ErrorCode.FORBIDDEN, "Optician account is not approved"))

        parsed = _parse_lines(items)
        if parsed.is_err():
            return Err(parsed.unwrap_err())
        lines = parsed.unwrap()

        products = Product.objects.in_bulk({line.product_id for line in lines})
        missing = sorted({str(line.product_id) for line in lines if line.product_id not in products})
        if missing:
            return Err(ServiceError(ErrorCode.PRODUCT_NOT_FOUND, "Product not found", {"product_ids": missing}))

        for product_id, quantity in _aggregate_demand(lines).items():
            product = products[product_id]
            if not product.is_active:
                return Err(
                    ServiceError(ErrorCode.PRODUCT_UNAVAILABLE, f"{product.name} is not available", {"product_id": str(product_id)})
                )
            if not can_fulfill_order_item(product.stock_qty, quantity):
                return Err(_insufficient_stock(product, product.stock_qty, quantity))

        snapshots = [OrderLineSnapshot.capture(products[line.product_id], line.quantity) for line in lines]
        notifier = notifier or get_notifier()
        try:
            with transaction.atomic():
                order = Order.objects.create(
                    optician=optician,
                    status=OrderStatus.PENDING,
                    source=OrderSource.OPTICIAN,
                    currency=settings.DEFAULT_CURRENCY,
                    total_amount=sum((s.line_total for s in snapshots), Decimal("0.00")),
                    note=(note or "").strip()[:MAX_NOTE_LENGTH],
                    created_by=optician.user.email,
                )
                OrderItem.objects.bulk_create([snapshot.to_item(order) for snapshot in snapshots])
                notifier.notify_admin(
                    "New order",
                    cls.build_order_message(order, optician, snapshots),
                    {"order_id": str(order.id)},
                )
        except DatabaseError as e:
            logger.exception(f"🔥 [Orders] Order submission failed for {optician.pk}: {e}")
            return Err(ServiceError.unexpected())

        logger.info(f"✅ [Orders] Order {order.order_number} submitted by {optician.pk}: {order.total_amount}")
        return Ok(order)

    @staticmethod
    def build_order_message(order: Order, optician: Optician, snapshots: list[OrderLineSnapshot]) -> str:
        lines = "\n\n".join(
            f"{index}. {s.product_name}\n   Ref: {s.product_reference}\n   Qty: {s.quantity}\n"
            f"   Price: {s.line_total:.2f} {order.currency}"
            for index, s in enumerate(snapshots, start=1)
        )
        return (
            "🛒 *New order*\n\n"
            f"👤 Client: {optician.business_name}\n"
            f"📧 Email: {optician.user.email}\n"
            f"📱 Phone: {optician.phone or 'N/A'}\n\n"
            f"📦 *Products:*\n{lines}\n\n"
            f"💰 *Total: {order.total_amount:.2f} {order.currency}*\n\n"
            f"🆔 Order #{order.short_id}"
        )

    @classmethod
    def admin_whatsapp_link(cls, order: Order) -> str | None:
        """wa.me deep link pre-filled with the order summary for the admin"""
        number = normalize_whatsapp_number(settings.ADMIN_WHATSAPP_NUMBER)
        if not number:
            return None
        snapshots = [
            OrderLineSnapshot(
                product=item.product,  # type: ignore[arg-type]
                product_name=item.product_name,
                product_reference=item.product_reference,
                unit_price=item.unit_price,
                sale_price=item.sale_price,
                discount_pct=item.discount_pct,
                quantity=item.quantity,
            )
            for item in order.items.all()
        ]
        message = cls.build_order_message(order, order.optician, snapshots)
        return f"https://wa.me/{number}?text={quote(message)}"

    # ===========================================================================
    # LINE REVIEW
    # ===========================================================================

    @classmethod
    def confirm_item(
        cls, item_id: UUID | str, admin_email: str, notifier: Notifier | None = None
    ) -> Result[OrderItem, ServiceError]:
        """
        ✅ Confirm a PENDING line.

        Stock is re-checked and taken atomically with the status write; the
        parent order becomes APPROVED and the optician earns the product's
        loyalty reward for the line.
        """
        notifier = notifier or get_notifier()
        try:
            with transaction.atomic():
                try:
                    item = OrderItem.objects.select_for_update().get(pk=item_id)
                except OrderItem.DoesNotExist:
                    raise ServiceAbort(ServiceError.not_found("Order item not found")) from None

                if not can_transition_item(item.status, OrderItemStatus.CONFIRMED):
                    raise ServiceAbort(ServiceError.already_processed(f"Order item already {item.status}"))

                product = Product.objects.filter(pk=item.product_id).first() if item.product_id else None
                if product is None:
                    raise ServiceAbort(ServiceError(ErrorCode.PRODUCT_NOT_FOUND, "Product no longer exists"))

                if not ProductStockService.decrement_stock(product.pk, item.quantity):
                    product.refresh_from_db(fields=["stock_qty", "in_stock"])
                    raise ServiceAbort(_insufficient_stock(product, product.stock_qty, item.quantity))

                now = timezone.now()
                updated = OrderItem.objects.filter(pk=item.pk, status=OrderItemStatus.PENDING).update(
                    status=OrderItemStatus.CONFIRMED, confirmed_at=now, confirmed_by=admin_email, updated_at=now
                )
                if not updated:
                    raise ServiceAbort(ServiceError.already_processed())

                Order.objects.filter(pk=item.order_id, status=OrderStatus.PENDING).update(
                    status=OrderStatus.APPROVED, validated_at=now, updated_at=now
                )

                order = Order.objects.select_related("optician").get(pk=item.order_id)
                reward = product.loyalty_points_reward * item.quantity
                if reward > 0:
                    LoyaltyPointsService.credit(
                        order.optician,
                        reward,
                        LoyaltyPointsTransaction.TYPE_EARNED,
                        f"Order {order.order_number}: {item.quantity} × {item.product_name}",
                        reference=f"order_item:{item.pk}",
                        created_by=admin_email,
                    )

                notifier.notify_optician(
                    order.optician_id,
                    "Order line confirmed",
                    f"{item.quantity} × {item.product_name} from order {order.order_number} has been confirmed.",
                )
        except ServiceAbort as abort:
            logger.warning(f"⚠️ [Orders] Confirmation of item {item_id} refused: {abort.error.code} {abort.error}")
            return Err(abort.error)
        except DatabaseError as e:
            logger.exception(f"🔥 [Orders] Confirmation of item {item_id} failed: {e}")
            return Err(ServiceError.unexpected())

        item.refresh_from_db()
        logger.info(f"✅ [Orders] Item {item.pk} confirmed by {admin_email}")
        return Ok(item)

    @classmethod
    def cancel_item(
        cls, item_id: UUID | str, admin_email: str, notifier: Notifier | None = None
    ) -> Result[OrderItem, ServiceError]:
        """❌ Cancel a PENDING line; nothing was reserved so stock is untouched"""
        notifier = notifier or get_notifier()
        try:
            with transaction.atomic():
                try:
                    item = OrderItem.objects.select_for_update().get(pk=item_id)
                except OrderItem.DoesNotExist:
                    raise ServiceAbort(ServiceError.not_found("Order item not found")) from None

                if not can_transition_item(item.status, OrderItemStatus.CANCELLED):
                    raise ServiceAbort(ServiceError.already_processed(f"Order item already {item.status}"))

                now = timezone.now()
                updated = OrderItem.objects.filter(pk=item.pk, status=OrderItemStatus.PENDING).update(
                    status=OrderItemStatus.CANCELLED, confirmed_at=now, confirmed_by=admin_email, updated_at=now
                )
                if not updated:
                    raise ServiceAbort(ServiceError.already_processed())

                # An order whose every line was cancelled is cancelled too
                if not OrderItem.objects.filter(order_id=item.order_id).exclude(status=OrderItemStatus.CANCELLED).exists():
                    Order.objects.filter(pk=item.order_id, status=OrderStatus.PENDING).update(
                        status=OrderStatus.CANCELLED, updated_at=now
                    )

                notifier.notify_optician(
                    Order.objects.values_list("optician_id", flat=True).get(pk=item.order_id),
                    "Order line cancelled",
                    f"{item.quantity} × {item.product_name} has been cancelled.",
                )
        except ServiceAbort as abort:
            logger.warning(f"⚠️ [Orders] Cancellation of item {item_id} refused: {abort.error.code}")
            return Err(abort.error)
        except DatabaseError as e:
            logger.exception(f"🔥 [Orders] Cancellation of item {item_id} failed: {e}")
            return Err(ServiceError.unexpected())

        item.refresh_from_db()
        logger.info(f"❌ [Orders] Item {item.pk} cancelled by {admin_email}")
        return Ok(item)

    # ===========================================================================
    # MANUAL ORDERS
    # ===========================================================================

    @classmethod
    def create_manual_order(
        cls,
        optician_id: UUID | str,
        items: list[dict[str, Any]],
        admin_email: str,
        note: str | None = None,
    ) -> Result[Order, ServiceError]:
        """
        📝 Admin-entered order, all-or-nothing.

        Every product must exist and have enough stock for the summed demand
        of its lines before anything is written. The order is created APPROVED
        with CONFIRMED lines and stock is taken in the same transaction.
        """
        parsed = _parse_lines(items)
        if parsed.is_err():
            return Err(parsed.unwrap_err())
        lines = parsed.unwrap()

        try:
            optician = Optician.objects.select_related("user").get(pk=optician_id)
        except (Optician.DoesNotExist, ValidationError):
            return Err(ServiceError.not_found("Optician not found"))
        if not optician.is_approved:
            return Err(ServiceError.validation("Optician account is not approved"))

        demand = _aggregate_demand(lines)
        products = Product.objects.in_bulk(list(demand))
        missing = sorted(str(product_id) for product_id in demand if product_id not in products)
        if missing:
            return Err(ServiceError(ErrorCode.PRODUCT_NOT_FOUND, "Product not found", {"product_ids": missing}))

        for product_id, quantity in demand.items():
            product = products[product_id]
            if not can_fulfill_order_item(product.stock_qty, quantity):
                return Err(_insufficient_stock(product, product.stock_qty, quantity))

        snapshots = [OrderLineSnapshot.capture(products[line.product_id], line.quantity) for line in lines]
        try:
            with transaction.atomic():
                for product_id, quantity in demand.items():
                    if not ProductStockService.decrement_stock(product_id, quantity):
                        product = products[product_id]
                        product.refresh_from_db(fields=["stock_qty", "in_stock"])
                        raise ServiceAbort(_insufficient_stock(product, product.stock_qty, quantity))

                now = timezone.now()
                order = Order.objects.create(
                    optician=optician,
                    status=OrderStatus.APPROVED,
                    source=OrderSource.MANUAL,
                    currency=settings.DEFAULT_CURRENCY,
                    total_amount=sum((s.line_total for s in snapshots), Decimal("0.00")),
                    note=(note or "").strip()[:MAX_NOTE_LENGTH],
                    validated_at=now,
                    created_by=admin_email,
                )
                OrderItem.objects.bulk_create(
                    [
                        snapshot.to_item(
                            order, status=OrderItemStatus.CONFIRMED, confirmed_at=now, confirmed_by=admin_email
                        )
                        for snapshot in snapshots
                    ]
                )
        except ServiceAbort as abort:
            logger.warning(f"⚠️ [Orders] Manual order for {optician_id} refused: {abort.error}")
            return Err(abort.error)
        except DatabaseError as e:
            logger.exception(f"🔥 [Orders] Manual order for {optician_id} failed: {e}")
            return Err(ServiceError.unexpected())

        logger.info(
            f"✅ [Orders] Manual order {order.order_number} for {optician.business_name}: "
            f"{len(snapshots)} lines, {order.total_amount} {order.currency} by {admin_email}"
        )
        return Ok(order)

    # ===========================================================================
    # QUERIES
    # ===========================================================================

    @staticmethod
    def list_for_optician(optician: Optician) -> QuerySet[Order]:
        return Order.objects.filter(optician=optician).prefetch_related("items")

    @staticmethod
    def list_orders(status: str | None = None) -> QuerySet[Order]:
        queryset = Order.objects.select_related("optician").prefetch_related("items")
        if status:
            queryset = queryset.filter(status=status)
        return queryset
