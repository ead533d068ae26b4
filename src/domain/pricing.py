"""
Towing Pricing  (Strategy Pattern)
==================================

Formula
-------
Cost = Base_Rate + max(0, Distance - Base_Distance) x Per_KM_Rate

* **Base_Rate** covers the first ``Base_Distance`` km.
* Every km beyond the allowance is charged at ``Per_KM_Rate``.
* A negative distance is clamped to 0 rather than rejected.

Complexity: O(1) per price calculation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .entities import CostBreakdown, PricingPolicy

logger = logging.getLogger(__name__)


# ── Strategy hierarchy ────────────────────────────────────────────────


class PricingStrategy(ABC):
    @abstractmethod
    def calculate(self, distance_km: float) -> CostBreakdown: ...


class TieredPricing(PricingStrategy):
    """Flat base rate up to an allowance, then linear per km."""

    def __init__(self, policy: PricingPolicy):
        self.policy = policy

    def calculate(self, distance_km: float) -> CostBreakdown:
        if distance_km < 0:
            logger.warning("Negative distance %.3f km clamped to 0", distance_km)
            distance_km = 0.0
        extra_km = max(0.0, distance_km - self.policy.base_distance_km)
        extra_cost = extra_km * self.policy.per_km_rate
        return CostBreakdown(
            cost=self.policy.base_rate + extra_cost,
            extra_km=extra_km,
            extra_cost=extra_cost,
        )


def calculate_cost(distance_km: float, policy: PricingPolicy) -> CostBreakdown:
    return TieredPricing(policy).calculate(distance_km)


# ── Booking record formatting ─────────────────────────────────────────


def format_distance_km(distance_km: float) -> str:
    return f"{distance_km:.1f}"


def format_cost(cost: float) -> str:
    return f"{cost:.2f}"
