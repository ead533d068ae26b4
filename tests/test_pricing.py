"""Unit tests for the tiered towing price."""

import pytest

from src.domain.entities import PricingPolicy
from src.domain.pricing import (
    TieredPricing,
    calculate_cost,
    format_cost,
    format_distance_km,
)

POLICY = PricingPolicy(base_rate=100.0, base_distance_km=10.0, per_km_rate=15.0)


class TestTieredPricing:
    def test_zero_distance_is_base_rate(self):
        result = calculate_cost(0.0, POLICY)
        assert result.cost == 100.0
        assert result.extra_km == 0.0
        assert result.extra_cost == 0.0

    @pytest.mark.parametrize("distance", [0.5, 3.0, 9.99, 10.0])
    def test_within_allowance_is_base_rate(self, distance):
        assert calculate_cost(distance, POLICY).cost == 100.0

    def test_beyond_allowance(self):
        result = calculate_cost(25.0, POLICY)
        assert result.extra_km == 15.0
        assert result.extra_cost == 225.0
        assert result.cost == 325.0  # 100 + 15*15

    def test_fractional_extra_km(self):
        result = calculate_cost(12.5, POLICY)
        assert result.extra_km == pytest.approx(2.5)
        assert result.cost == pytest.approx(137.5)

    def test_negative_distance_clamped(self):
        result = calculate_cost(-5.0, POLICY)
        assert result.cost == 100.0
        assert result.extra_km == 0.0

    def test_monotonic_in_distance(self):
        costs = [calculate_cost(d, POLICY).cost for d in (0, 5, 10, 11, 20, 50, 200)]
        assert costs == sorted(costs)
        assert costs[-1] > costs[3] > costs[2]

    def test_strategy_uses_policy(self):
        strategy = TieredPricing(
            PricingPolicy(base_rate=80.0, base_distance_km=5.0, per_km_rate=2.0)
        )
        assert strategy.calculate(8.0).cost == 86.0


class TestBookingFormatting:
    def test_distance_one_decimal(self):
        assert format_distance_km(12.345) == "12.3"
        assert format_distance_km(0.0) == "0.0"

    def test_cost_two_decimals(self):
        assert format_cost(325.0) == "325.00"
        assert format_cost(99.999) == "100.00"
