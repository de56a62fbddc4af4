"""
Optician services for the Optician Marketplace
Account approval, loyalty balance ledger and proximity search.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from django.db import transaction
from django.db.models import F, QuerySet
from django.utils import timezone

from apps.common.types import Err, ErrorCode, Ok, Result, ServiceError
from apps.common.validators import log_security_event
from apps.settings.services import SettingsService

from .geolocation import GeoPoint, rank_by_proximity
from .models import LoyaltyPointsTransaction, Optician

if TYPE_CHECKING:
    from uuid import UUID

    from apps.users.models import User

logger = logging.getLogger(__name__)

REGISTRATION_BONUS_SETTING = "loyalty.registration_bonus_points"
NEAREST_LIMIT_SETTING = "opticians.nearest_default_limit"

# ===============================================================================
# LOYALTY POINTS LEDGER
# ===============================================================================


class LoyaltyPointsService:
    """
    💎 Sole writer of Optician.loyalty_points.

    Credits are F-expression increments; debits are conditional decrements that
    only match while the committed balance still covers them, so the balance can
    never go negative and is never silently clamped.
    """

    @staticmethod
    def _record(
        optician: Optician,
        points: int,
        transaction_type: str,
        description: str,
        reference: str = "",
        created_by: str = "",
    ) -> LoyaltyPointsTransaction:
        optician.refresh_from_db(fields=["loyalty_points"])
        return LoyaltyPointsTransaction.objects.create(
            optician=optician,
            transaction_type=transaction_type,
            points=points,
            balance_after=optician.loyalty_points,
            description=description[:255],
            reference=reference,
            created_by=created_by,
        )

    @classmethod
    @transaction.atomic
    def credit(
        cls,
        optician: Optician,
        points: int,
        transaction_type: str = LoyaltyPointsTransaction.TYPE_EARNED,
        description: str = "",
        reference: str = "",
        created_by: str = "",
    ) -> Result[LoyaltyPointsTransaction, ServiceError]:
        """Add points to an optician's balance"""
        if points <= 0:
            return Err(ServiceError.validation("Points to credit must be positive"))

        Optician.objects.filter(pk=optician.pk).update(
            loyalty_points=F("loyalty_points") + points, updated_at=timezone.now()
        )
        entry = cls._record(optician, points, transaction_type, description, reference, created_by)
        logger.info(f"💎 [Points] +{points} for {optician.pk} → {entry.balance_after}")
        return Ok(entry)

    @classmethod
    @transaction.atomic
    def debit(
        cls,
        optician: Optician,
        points: int,
        transaction_type: str = LoyaltyPointsTransaction.TYPE_REDEEMED,
        description: str = "",
        reference: str = "",
        created_by: str = "",
    ) -> Result[LoyaltyPointsTransaction, ServiceError]:
        """Remove points only if the live balance covers them"""
        if points <= 0:
            return Err(ServiceError.validation("Points to debit must be positive"))

        updated = Optician.objects.filter(pk=optician.pk, loyalty_points__gte=points).update(
            loyalty_points=F("loyalty_points") - points, updated_at=timezone.now()
        )
        if not updated:
            optician.refresh_from_db(fields=["loyalty_points"])
            logger.warning(
                f"⚠️ [Points] Debit of {points} refused for {optician.pk}: balance {optician.loyalty_points}"
            )
            return Err(
                ServiceError(
                    ErrorCode.INSUFFICIENT_POINTS,
                    f"insufficient points: available {optician.loyalty_points}, required {points}",
                    {"available": optician.loyalty_points, "required": points},
                )
            )

        entry = cls._record(optician, -points, transaction_type, description, reference, created_by)
        logger.info(f"💎 [Points] -{points} for {optician.pk} → {entry.balance_after}")
        return Ok(entry)

    @classmethod
    def adjust(
        cls, optician_id: UUID | str, delta: Any, admin_email: str, reason: str = ""
    ) -> Result[Optician, ServiceError]:
        """🔧 Admin balance correction; refuses to go below zero"""
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            return Err(ServiceError.validation("Points delta must be a non-zero integer"))

        try:
            optician = Optician.objects.get(pk=optician_id)
        except Optician.DoesNotExist:
            return Err(ServiceError.not_found("Optician not found"))

        description = reason or "Manual adjustment by administrator"
        if delta > 0:
            result = cls.credit(
                optician, delta, LoyaltyPointsTransaction.TYPE_ADJUSTED, description, created_by=admin_email
            )
        else:
            result = cls.debit(
                optician, -delta, LoyaltyPointsTransaction.TYPE_ADJUSTED, description, created_by=admin_email
            )

        if result.is_err():
            error = result.unwrap_err()
            if error.code == ErrorCode.INSUFFICIENT_POINTS:
                return Err(ServiceError.validation("Points cannot be negative", **error.details))
            return Err(error)

        log_security_event(
            "loyalty_points_adjusted",
            {"optician": str(optician.pk), "delta": delta, "admin": admin_email, "reason": description},
        )
        optician.refresh_from_db()
        return Ok(optician)

    @staticmethod
    def history(optician: Optician) -> QuerySet[LoyaltyPointsTransaction]:
        return LoyaltyPointsTransaction.objects.filter(optician=optician).order_by("-created_at")


# ===============================================================================
# OPTICIAN ACCOUNTS
# ===============================================================================


class OpticianService:
    """👓 Optician account lifecycle and discovery"""

    ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {  # noqa: RUF012
        Optician.STATUS_PENDING: frozenset({Optician.STATUS_APPROVED, Optician.STATUS_REJECTED}),
        Optician.STATUS_REJECTED: frozenset({Optician.STATUS_APPROVED}),
        Optician.STATUS_APPROVED: frozenset({Optician.STATUS_REJECTED}),
    }

    PROFILE_FIELDS = (
        "business_name",
        "first_name",
        "last_name",
        "phone",
        "whatsapp",
        "address",
        "city",
        "postal_code",
        "latitude",
        "longitude",
    )

    @classmethod
    def register(cls, user: User, data: dict[str, Any]) -> Result[Optician, ServiceError]:
        """Create the PENDING optician profile for an optician user"""
        if not user.is_optician_role:
            return Err(ServiceError(ErrorCode.FORBIDDEN, "Only optician accounts can register a business"))
        if Optician.objects.filter(user=user).exists():
            return Err(ServiceError.validation("Optician profile already exists"))
        if not (data.get("business_name") or "").strip():
            return Err(ServiceError.validation("Business name is required", field="business_name"))

        optician = Optician.objects.create(
            user=user, **{field: data[field] for field in cls.PROFILE_FIELDS if field in data}
        )
        logger.info(f"✅ [Opticians] Registered {optician.business_name} ({optician.pk})")
        return Ok(optician)

    @classmethod
    def set_status(cls, optician_id: UUID | str, new_status: str, admin_email: str) -> Result[Optician, ServiceError]:
        """
        Move an optician between review states.

        The first approval credits the configured registration bonus.
        """
        if new_status not in dict(Optician.STATUS_CHOICES):
            return Err(ServiceError.validation(f"Unknown status: {new_status}"))

        with transaction.atomic():
            try:
                optician = Optician.objects.select_for_update().get(pk=optician_id)
            except Optician.DoesNotExist:
                return Err(ServiceError.not_found("Optician not found"))

            current = optician.status
            if new_status == current:
                return Err(ServiceError.already_processed(f"Optician already {current}"))
            if new_status not in cls.ALLOWED_TRANSITIONS.get(current, frozenset()):
                return Err(ServiceError.validation(f"Cannot move optician from {current} to {new_status}"))

            first_approval = new_status == Optician.STATUS_APPROVED and optician.approved_at is None
            optician.status = new_status
            if first_approval:
                optician.approved_at = timezone.now()
            optician.save(update_fields=["status", "approved_at", "updated_at"])

            if first_approval:
                bonus = SettingsService.get_integer_setting(REGISTRATION_BONUS_SETTING, 0)
                if bonus > 0:
                    LoyaltyPointsService.credit(
                        optician,
                        bonus,
                        LoyaltyPointsTransaction.TYPE_BONUS,
                        "Registration bonus",
                        created_by=admin_email,
                    )

        logger.info(f"✅ [Opticians] {optician.pk}: {current} → {new_status} by {admin_email}")
        optician.refresh_from_db()
        return Ok(optician)

    @staticmethod
    def nearest(
        latitude: float, longitude: float, limit: int | None = None, city: str | None = None
    ) -> list[tuple[Optician, float]]:
        """Approved opticians ranked by great-circle distance"""
        if limit is None:
            limit = SettingsService.get_integer_setting(NEAREST_LIMIT_SETTING, 10)

        candidates = Optician.objects.filter(
            status=Optician.STATUS_APPROVED, latitude__isnull=False, longitude__isnull=False
        ).order_by("business_name", "id")
        if city:
            candidates = candidates.filter(city__icontains=city)

        return rank_by_proximity(GeoPoint(latitude, longitude), candidates, limit)
