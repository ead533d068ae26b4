"""
Domain entities and value objects.

Patterns used
-------------
- **Value Objects** (``Coordinate``, ``ShopLocation``, ``PricingPolicy``,
  ``QuoteResult``): frozen dataclasses, safe to share between concurrent
  requests.
- **State Pattern** on ``Appointment``: enforces valid lifecycle transitions
  (pending -> confirmed -> completed | cancelled).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .enums import APPOINTMENT_TRANSITIONS, AppointmentStatus, DistanceSource


class InvalidStateTransition(Exception):
    """Raised when an appointment status change violates the state machine."""


class InvalidCoordinate(ValueError):
    """Raised for a latitude / longitude that is not finite or out of range."""


class RoutingUnavailable(Exception):
    """The routing service failed, timed out or found no route."""


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        lat, lng = self.latitude, self.longitude
        if not (math.isfinite(lat) and -90.0 <= lat <= 90.0):
            raise InvalidCoordinate(f"latitude out of range: {lat!r}")
        if not (math.isfinite(lng) and -180.0 <= lng <= 180.0):
            raise InvalidCoordinate(f"longitude out of range: {lng!r}")


@dataclass(frozen=True)
class ShopLocation:
    coordinate: Coordinate
    name: str
    address: str
    phone: str


@dataclass(frozen=True)
class PricingPolicy:
    base_rate: float
    base_distance_km: float
    per_km_rate: float


@dataclass(frozen=True)
class CostBreakdown:
    cost: float
    extra_km: float
    extra_cost: float


@dataclass(frozen=True)
class RoutedDistance:
    """What the routing service reports for a single driving route."""

    distance_km: float
    duration_text: str
    # (lat, lng) pairs along the route, for map display
    path: tuple[tuple[float, float], ...] = ()


@dataclass(frozen=True)
class QuoteResult:
    distance_km: float
    cost: float
    extra_km: float
    extra_cost: float
    source: DistanceSource
    duration_text: Optional[str] = None
    path: tuple[tuple[float, float], ...] = ()


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Appointment:
    id: Optional[int] = None
    status: AppointmentStatus = AppointmentStatus.PENDING

    def transition_to(self, new_status: AppointmentStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        allowed = APPOINTMENT_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
