"""
Loyalty redemption services for the Optician Marketplace.

A redemption moves PENDING → APPROVED | REJECTED exactly once. Approval
re-validates stock and balance against locked rows and debits points in the
same transaction as the status write; any failure leaves both untouched.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from django.db import DatabaseError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.common.admission import (
    can_afford_redemption,
    can_fulfill_order_item,
    insufficient_stock_message,
    is_redeemable,
)
from apps.common.types import Err, ErrorCode, Ok, Result, ServiceAbort, ServiceError
from apps.common.validators import MAX_ITEMS_PER_REQUEST, MAX_REASON_LENGTH
from apps.notifications.services import Notifier, get_notifier
from apps.opticians.models import LoyaltyPointsTransaction, Optician
from apps.opticians.services import LoyaltyPointsService
from apps.products.models import Product

from .models import (
    LoyaltyProduct,
    LoyaltyRedemption,
    LoyaltyRedemptionItem,
    RedemptionStatus,
    can_transition_redemption,
)

if TYPE_CHECKING:
    from uuid import UUID

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "Rejected by administrator"


@dataclass(frozen=True)
class RedemptionItemSnapshot:
    """📸 Reward line captured from the live catalog at request time"""

    loyalty_product: LoyaltyProduct
    product_name: str
    quantity: int
    points_cost: int
    image_url: str

    @property
    def total_points(self) -> int:
        return self.points_cost * self.quantity

    @classmethod
    def capture(cls, loyalty_product: LoyaltyProduct, quantity: int) -> RedemptionItemSnapshot:
        return cls(
            loyalty_product=loyalty_product,
            product_name=loyalty_product.name,
            quantity=quantity,
            points_cost=loyalty_product.points_cost,
            image_url=loyalty_product.image_url,
        )


def _normalize_request_items(items: Any) -> Result[OrderedDict[uuid.UUID, int], ServiceError]:
    """Validate `[{loyalty_product_id, quantity}]` and merge repeated products"""
    if not isinstance(items, list) or not items:
        return Err(ServiceError.validation("At least one item is required"))
    if len(items) > MAX_ITEMS_PER_REQUEST:
        return Err(ServiceError.validation(f"At most {MAX_ITEMS_PER_REQUEST} items per request"))

    merged: OrderedDict[uuid.UUID, int] = OrderedDict()
    for item in items:
        try:
            product_id = uuid.UUID(str(item["loyalty_product_id"]))
        except (KeyError, TypeError, ValueError):
            return Err(ServiceError.validation("Invalid loyalty product id", field="loyalty_product_id"))
        quantity = item.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            return Err(ServiceError.validation("Quantity must be a positive integer", field="quantity"))
        merged[product_id] = merged.get(product_id, 0) + quantity
    return Ok(merged)


class RedemptionService:
    """🎁 Loyalty redemption state machine"""

    # ===========================================================================
    # CREATION
    # ===========================================================================

    @classmethod
    def create_redemption(
        cls,
        optician: Optician,
        items: list[dict[str, Any]],
        claimed_total: int | None = None,
        notifier: Notifier | None = None,
    ) -> Result[LoyaltyRedemption, ServiceError]:
        """
        Create a PENDING redemption for an optician.

        The affordability check uses the server-computed total; a client-claimed
        total is only compared for logging. The balance is not touched here.
        """
        normalized = _normalize_request_items(items)
        if normalized.is_err():
            return Err(normalized.unwrap_err())
        requested = normalized.unwrap()

        catalog = LoyaltyProduct.objects.select_related("product").in_bulk(list(requested))
        missing = [str(product_id) for product_id in requested if product_id not in catalog]
        if missing:
            return Err(
                ServiceError(ErrorCode.PRODUCT_NOT_FOUND, "Loyalty product not found", {"product_ids": missing})
            )

        snapshots: list[RedemptionItemSnapshot] = []
        for product_id, quantity in requested.items():
            loyalty_product = catalog[product_id]
            if not is_redeemable(loyalty_product):
                return Err(
                    ServiceError(
                        ErrorCode.PRODUCT_UNAVAILABLE,
                        f"{loyalty_product.name} is not available",
                        {"product_id": str(product_id)},
                    )
                )
            snapshots.append(RedemptionItemSnapshot.capture(loyalty_product, quantity))

        total_points = sum(snapshot.total_points for snapshot in snapshots)
        if claimed_total is not None and claimed_total != total_points:
            logger.warning(
                f"⚠️ [Loyalty] Claimed total {claimed_total} differs from computed {total_points} "
                f"for optician {optician.pk}"
            )

        notifier = notifier or get_notifier()
        try:
            with transaction.atomic():
                locked = Optician.objects.select_for_update().get(pk=optician.pk)
                if not can_afford_redemption(locked.loyalty_points, total_points):
                    return Err(
                        ServiceError(
                            ErrorCode.INSUFFICIENT_POINTS,
                            f"insufficient points: available {locked.loyalty_points}, required {total_points}",
                            {"available": locked.loyalty_points, "required": total_points},
                        )
                    )

                redemption = LoyaltyRedemption.objects.create(optician=locked, total_points=total_points)
                LoyaltyRedemptionItem.objects.bulk_create(
                    [
                        LoyaltyRedemptionItem(
                            redemption=redemption,
                            loyalty_product=snapshot.loyalty_product,
                            product_name=snapshot.product_name,
                            quantity=snapshot.quantity,
                            points_cost=snapshot.points_cost,
                            total_points=snapshot.total_points,
                            image_url=snapshot.image_url,
                        )
                        for snapshot in snapshots
                    ]
                )

                lines = "\n".join(f"- {s.quantity} × {s.product_name} ({s.total_points} pts)" for s in snapshots)
                notifier.notify_admin(
                    "New loyalty redemption",
                    f"{locked.business_name} requested a redemption of {total_points} points:\n{lines}",
                    {"redemption_id": str(redemption.id)},
                )
        except DatabaseError as e:
            logger.exception(f"🔥 [Loyalty] Redemption creation failed for {optician.pk}: {e}")
            return Err(ServiceError.unexpected())

        logger.info(f"✅ [Loyalty] Redemption {redemption.id} created: {total_points} pts by {optician.pk}")
        return Ok(redemption)

    # ===========================================================================
    # APPROVAL
    # ===========================================================================

    @staticmethod
    def _check_live_stock(redemption: LoyaltyRedemption) -> None:
        """Raise ServiceAbort unless every stock-backed line can still be served"""
        demand: dict[Any, int] = {}
        names: dict[Any, str] = {}
        for item in redemption.items.select_related("loyalty_product"):
            loyalty_product = item.loyalty_product
            if loyalty_product is None or loyalty_product.product_id is None:
                continue
            demand[loyalty_product.product_id] = demand.get(loyalty_product.product_id, 0) + item.quantity
            names[loyalty_product.product_id] = item.product_name

        if not demand:
            return

        products = Product.objects.select_for_update().in_bulk(list(demand))
        for product_id, quantity in demand.items():
            product = products.get(product_id)
            available = product.stock_qty if product is not None else 0
            if product is None or not product.in_stock or not can_fulfill_order_item(available, quantity):
                raise ServiceAbort(
                    ServiceError(
                        ErrorCode.INSUFFICIENT_STOCK,
                        insufficient_stock_message(available, quantity),
                        {"product": names[product_id], "available": available, "requested": quantity},
                    )
                )

    @classmethod
    def approve_redemption(
        cls, redemption_id: UUID | str, admin_email: str, notifier: Notifier | None = None
    ) -> Result[LoyaltyRedemption, ServiceError]:
        """✅ Approve a PENDING redemption and debit the optician's points"""
        notifier = notifier or get_notifier()
        try:
            with transaction.atomic():
                try:
                    redemption = LoyaltyRedemption.objects.select_for_update().get(pk=redemption_id)
                except LoyaltyRedemption.DoesNotExist:
                    raise ServiceAbort(ServiceError.not_found("Redemption not found")) from None

                if not can_transition_redemption(redemption.status, RedemptionStatus.APPROVED):
                    raise ServiceAbort(ServiceError.already_processed(f"Redemption already {redemption.status}"))

                cls._check_live_stock(redemption)

                debit = LoyaltyPointsService.debit(
                    redemption.optician,
                    redemption.total_points,
                    LoyaltyPointsTransaction.TYPE_REDEEMED,
                    f"Loyalty redemption {redemption.id}",
                    reference=f"redemption:{redemption.id}",
                    created_by=admin_email,
                )
                if debit.is_err():
                    raise ServiceAbort(debit.unwrap_err())

                now = timezone.now()
                updated = LoyaltyRedemption.objects.filter(pk=redemption.pk, status=RedemptionStatus.PENDING).update(
                    status=RedemptionStatus.APPROVED, approved_at=now, approved_by=admin_email, updated_at=now
                )
                if not updated:
                    raise ServiceAbort(ServiceError.already_processed())

                notifier.notify_optician(
                    redemption.optician_id,
                    "Redemption approved",
                    f"Your redemption of {redemption.total_points} points has been approved.",
                )
        except ServiceAbort as abort:
            logger.warning(f"⚠️ [Loyalty] Approval of {redemption_id} refused: {abort.error.code} {abort.error}")
            return Err(abort.error)
        except DatabaseError as e:
            logger.exception(f"🔥 [Loyalty] Approval of {redemption_id} failed: {e}")
            return Err(ServiceError.unexpected())

        redemption.refresh_from_db()
        logger.info(f"✅ [Loyalty] Redemption {redemption.id} approved by {admin_email}")
        return Ok(redemption)

    @classmethod
    def approve_item(
        cls, item_id: UUID | str, admin_email: str, notifier: Notifier | None = None
    ) -> Result[LoyaltyRedemption, ServiceError]:
        """
        Approve via an item.

        Items have no status of their own: approving one approves its whole
        redemption.
        """
        redemption_id = cls._redemption_id_for_item(item_id)
        if redemption_id is None:
            return Err(ServiceError.not_found("Redemption item not found"))
        return cls.approve_redemption(redemption_id, admin_email, notifier)

    # ===========================================================================
    # REJECTION
    # ===========================================================================

    @classmethod
    def reject_redemption(
        cls,
        redemption_id: UUID | str,
        admin_email: str,
        reason: str | None = None,
        notifier: Notifier | None = None,
    ) -> Result[LoyaltyRedemption, ServiceError]:
        """❌ Reject a PENDING redemption; the balance is not touched"""
        notifier = notifier or get_notifier()
        reason = (reason or "").strip()[:MAX_REASON_LENGTH] or DEFAULT_REJECTION_REASON
        try:
            with transaction.atomic():
                try:
                    redemption = LoyaltyRedemption.objects.select_for_update().get(pk=redemption_id)
                except LoyaltyRedemption.DoesNotExist:
                    raise ServiceAbort(ServiceError.not_found("Redemption not found")) from None

                if not can_transition_redemption(redemption.status, RedemptionStatus.REJECTED):
                    raise ServiceAbort(ServiceError.already_processed(f"Redemption already {redemption.status}"))

                now = timezone.now()
                updated = LoyaltyRedemption.objects.filter(pk=redemption.pk, status=RedemptionStatus.PENDING).update(
                    status=RedemptionStatus.REJECTED,
                    rejected_at=now,
                    rejected_by=admin_email,
                    rejection_reason=reason,
                    updated_at=now,
                )
                if not updated:
                    raise ServiceAbort(ServiceError.already_processed())

                notifier.notify_optician(
                    redemption.optician_id,
                    "Redemption rejected",
                    f"Your redemption of {redemption.total_points} points was rejected: {reason}",
                )
        except ServiceAbort as abort:
            logger.warning(f"⚠️ [Loyalty] Rejection of {redemption_id} refused: {abort.error.code}")
            return Err(abort.error)
        except DatabaseError as e:
            logger.exception(f"🔥 [Loyalty] Rejection of {redemption_id} failed: {e}")
            return Err(ServiceError.unexpected())

        redemption.refresh_from_db()
        logger.info(f"❌ [Loyalty] Redemption {redemption.id} rejected by {admin_email}")
        return Ok(redemption)

    @classmethod
    def reject_item(
        cls,
        item_id: UUID | str,
        admin_email: str,
        reason: str | None = None,
        notifier: Notifier | None = None,
    ) -> Result[LoyaltyRedemption, ServiceError]:
        redemption_id = cls._redemption_id_for_item(item_id)
        if redemption_id is None:
            return Err(ServiceError.not_found("Redemption item not found"))
        return cls.reject_redemption(redemption_id, admin_email, reason, notifier)

    # ===========================================================================
    # QUERIES
    # ===========================================================================

    @staticmethod
    def _redemption_id_for_item(item_id: UUID | str) -> Any:
        return LoyaltyRedemptionItem.objects.filter(pk=item_id).values_list("redemption_id", flat=True).first()

    @staticmethod
    def list_for_optician(optician: Optician) -> QuerySet[LoyaltyRedemption]:
        return LoyaltyRedemption.objects.filter(optician=optician).prefetch_related("items")

    @staticmethod
    def list_redemptions(status: str | None = None) -> QuerySet[LoyaltyRedemption]:
        queryset = LoyaltyRedemption.objects.select_related("optician").prefetch_related("items")
        if status:
            queryset = queryset.filter(status=status)
        return queryset

    @classmethod
    def list_pending(cls) -> QuerySet[LoyaltyRedemption]:
        return cls.list_redemptions(RedemptionStatus.PENDING)

    @staticmethod
    def available_rewards() -> QuerySet[LoyaltyProduct]:
        return LoyaltyProduct.objects.filter(is_active=True).select_related("product")
