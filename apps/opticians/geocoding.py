"""
Address geocoding for opticians via Nominatim (OpenStreetMap).

Lookups fall back through three tiers: Plus Code, full postal address, then
city only. A miss is not an error; callers treat it as "coordinates unknown".
"""

from __future__ import annotations

import logging
import re
import time
from typing import TYPE_CHECKING, Any

import requests
from django.conf import settings

from .geolocation import GeoPoint

if TYPE_CHECKING:
    from .models import Optician

logger = logging.getLogger(__name__)

PLUS_CODE_PATTERN = re.compile(r"^[23456789CFGHJMPQRVWX]{4,8}\+[23456789CFGHJMPQRVWX]{2,3}", re.IGNORECASE)


def is_plus_code(value: str) -> bool:
    return bool(PLUS_CODE_PATTERN.match(value.strip()))


class GeocodingService:
    """🗺️ Nominatim client with tiered address fallback"""

    @staticmethod
    def _country() -> str:
        return str(getattr(settings, "GEOCODING_DEFAULT_COUNTRY", "Morocco"))

    @classmethod
    def build_queries(cls, address: str = "", city: str = "", postal_code: str = "") -> list[str]:
        """Ordered search strings to try, most precise first"""
        country = cls._country()
        address = (address or "").strip()
        city = (city or "").strip()
        postal_code = (postal_code or "").strip()
        queries: list[str] = []

        if address and is_plus_code(address):
            queries.append(address if "," in address else f"{address}, {country}")

        full_parts = [part for part in (address, postal_code, city) if part]
        if full_parts:
            queries.append(", ".join([*full_parts, country]))

        if city:
            queries.append(f"{city}, {country}")

        # Drop repeats while keeping tier order
        return list(dict.fromkeys(queries))

    @staticmethod
    def _search(query: str) -> GeoPoint | None:
        """🌐 Single Nominatim lookup; network and parse failures count as a miss"""
        try:
            response = requests.get(
                settings.GEOCODING_BASE_URL,
                params={"q": query, "format": "json", "limit": 1},
                headers={"User-Agent": settings.GEOCODING_USER_AGENT},
                timeout=settings.EXTERNAL_HTTP_TIMEOUT,
            )
            response.raise_for_status()
            results: list[dict[str, Any]] = response.json()
        except requests.exceptions.RequestException as e:
            logger.warning(f"⚠️ [Geocoding] Lookup failed for '{query}': {e}")
            return None
        except ValueError:
            logger.warning(f"⚠️ [Geocoding] Invalid JSON for '{query}'")
            return None

        if not results:
            return None

        try:
            return GeoPoint(latitude=float(results[0]["lat"]), longitude=float(results[0]["lon"]))
        except (KeyError, TypeError, ValueError):
            logger.warning(f"⚠️ [Geocoding] Unexpected result shape for '{query}'")
            return None

    @classmethod
    def geocode(cls, address: str = "", city: str = "", postal_code: str = "") -> GeoPoint | None:
        """Return the first tier that resolves, or None"""
        for query in cls.build_queries(address, city, postal_code):
            point = cls._search(query)
            if point is not None:
                logger.info(f"📍 [Geocoding] '{query}' → {point.latitude}, {point.longitude}")
                return point
        logger.info(f"🔍 [Geocoding] No match for address='{address}' city='{city}'")
        return None

    @classmethod
    def geocode_optician(cls, optician: Optician) -> GeoPoint | None:
        """Resolve and store an optician's coordinates"""
        point = cls.geocode(optician.address, optician.city, optician.postal_code)
        if point is not None:
            optician.latitude = point.latitude
            optician.longitude = point.longitude
            optician.save(update_fields=["latitude", "longitude", "updated_at"])
        return point

    @classmethod
    def geocode_missing(cls, delay_seconds: float | None = None) -> dict[str, int]:
        """
        Batch-geocode opticians that have an address but no coordinates.

        Sleeps between lookups to respect the Nominatim rate limit.
        """
        from .models import Optician  # noqa: PLC0415

        if delay_seconds is None:
            delay_seconds = settings.GEOCODING_BATCH_DELAY_SECONDS

        pending = Optician.objects.filter(latitude__isnull=True).exclude(address="")
        summary = {"processed": 0, "succeeded": 0, "failed": 0}

        for index, optician in enumerate(pending.iterator()):
            if index and delay_seconds > 0:
                time.sleep(delay_seconds)
            summary["processed"] += 1
            if cls.geocode_optician(optician) is not None:
                summary["succeeded"] += 1
            else:
                summary["failed"] += 1

        logger.info(
            f"🗺️ [Geocoding] Batch done: {summary['succeeded']}/{summary['processed']} resolved"
        )
        return summary
