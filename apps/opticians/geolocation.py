"""
Great-circle proximity ranking for optician discovery.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, TypeVar

EARTH_RADIUS_KM = 6371.0
METERS_PER_KM = 1000


class Locatable(Protocol):
    latitude: float | None
    longitude: float | None


L = TypeVar("L", bound=Locatable)


@dataclass(frozen=True)
class GeoPoint:
    """📍 A WGS84 coordinate pair"""

    latitude: float
    longitude: float


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two coordinates."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def rank_by_proximity(origin: GeoPoint, candidates: Iterable[L], limit: int | None = None) -> list[tuple[L, float]]:
    """
    Rank candidates by distance from `origin`, nearest first.

    Candidates missing either coordinate are dropped (0.0 is a real coordinate).
    Equal distances keep their input order.
    """
    ranked = [
        (candidate, haversine_km(origin.latitude, origin.longitude, candidate.latitude, candidate.longitude))
        for candidate in candidates
        if candidate.latitude is not None and candidate.longitude is not None
    ]
    ranked.sort(key=lambda pair: pair[1])
    if limit is not None:
        ranked = ranked[: max(limit, 0)]
    return ranked


def format_distance(distance_km: float) -> str:
    """Human readable distance: metres below 1 km, otherwise one decimal in km."""
    if distance_km < 1:
        return f"{round(distance_km * METERS_PER_KM)} m"
    return f"{distance_km:.1f} km"
