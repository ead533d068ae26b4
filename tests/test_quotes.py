"""
Unit tests for the towing quote workflow.

Covers the routed path, the great-circle fallback (error, timeout,
unexpected exception), the optional route cache, and isolation between
concurrent estimates.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import pytest

from src.domain.distance import great_circle_distance_km
from src.domain.entities import Coordinate, RoutedDistance, RoutingUnavailable
from src.domain.enums import DistanceSource
from src.domain.quotes import QuoteEstimator
from tests.conftest import POLICY, SHOP, FakeRouting

PICKUP = Coordinate(43.7615, -79.4111)  # North York


class SlowRouting:
    def __init__(self, delay: float):
        self.delay = delay

    async def route(self, origin, destination) -> RoutedDistance:
        await asyncio.sleep(self.delay)
        return RoutedDistance(distance_km=1.0, duration_text="1 min")


class DictCache:
    def __init__(self):
        self.store: dict[Coordinate, RoutedDistance] = {}

    async def get(self, pickup: Coordinate) -> Optional[RoutedDistance]:
        return self.store.get(pickup)

    async def set(self, pickup: Coordinate, routed: RoutedDistance) -> None:
        self.store[pickup] = routed


class TestRoutedQuote:
    @pytest.mark.asyncio
    async def test_uses_routed_distance(self, estimator, routing):
        result = await estimator.estimate(PICKUP)

        assert result.source == DistanceSource.ROUTED
        assert result.distance_km == 25.0
        assert result.duration_text == "28 mins"
        assert result.extra_km == 15.0
        assert result.extra_cost == 225.0
        assert result.cost == 325.0
        assert len(result.path) == 2

    @pytest.mark.asyncio
    async def test_routes_from_pickup_to_shop(self, estimator, routing):
        await estimator.estimate(PICKUP)
        assert routing.calls == [(PICKUP, SHOP.coordinate)]

    @pytest.mark.asyncio
    async def test_short_route_costs_base_rate(self):
        routing = FakeRouting(
            routed=RoutedDistance(distance_km=4.2, duration_text="9 mins")
        )
        result = await QuoteEstimator(SHOP, POLICY, routing).estimate(PICKUP)
        assert result.cost == POLICY.base_rate

    @pytest.mark.asyncio
    async def test_negative_routed_distance_is_clamped(self):
        routing = FakeRouting(
            routed=RoutedDistance(distance_km=-3.0, duration_text="1 min")
        )
        result = await QuoteEstimator(SHOP, POLICY, routing).estimate(PICKUP)
        assert result.distance_km == 0.0
        assert result.cost == POLICY.base_rate


class TestFallback:
    @pytest.mark.asyncio
    async def test_routing_error_falls_back_to_great_circle(self):
        routing = FakeRouting(error=RoutingUnavailable("OSRM down"))
        result = await QuoteEstimator(SHOP, POLICY, routing).estimate(PICKUP)

        expected = great_circle_distance_km(PICKUP, SHOP.coordinate)
        assert result.source == DistanceSource.GEODESIC
        assert result.duration_text is None
        assert result.path == ()
        assert result.distance_km == pytest.approx(expected, abs=1e-6)
        assert result.cost == pytest.approx(
            POLICY.base_rate + (expected - POLICY.base_distance_km) * POLICY.per_km_rate
        )

    @pytest.mark.asyncio
    async def test_same_point_as_shop_costs_base_rate(self):
        routing = FakeRouting(error=RoutingUnavailable("no route"))
        pickup = Coordinate(43.6532, -79.3832)
        result = await QuoteEstimator(SHOP, POLICY, routing).estimate(pickup)
        assert result.distance_km == 0.0
        assert result.cost == 100.0

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self):
        estimator = QuoteEstimator(
            SHOP, POLICY, SlowRouting(delay=5.0), timeout_seconds=0.05
        )
        result = await estimator.estimate(PICKUP)
        assert result.source == DistanceSource.GEODESIC
        assert result.duration_text is None

    @pytest.mark.asyncio
    async def test_unexpected_exception_falls_back(self):
        routing = FakeRouting(error=RuntimeError("boom"))
        result = await QuoteEstimator(SHOP, POLICY, routing).estimate(PICKUP)
        assert result.source == DistanceSource.GEODESIC

    @pytest.mark.asyncio
    async def test_resolve_distance_signals_failure(self):
        routing = FakeRouting(error=RuntimeError("boom"))
        with pytest.raises(RoutingUnavailable):
            await QuoteEstimator(SHOP, POLICY, routing).resolve_distance(PICKUP)

    @pytest.mark.asyncio
    async def test_routing_is_not_retried(self):
        routing = FakeRouting(error=RoutingUnavailable("down"))
        await QuoteEstimator(SHOP, POLICY, routing).estimate(PICKUP)
        assert len(routing.calls) == 1


class TestRouteCache:
    @pytest.mark.asyncio
    async def test_successful_route_is_cached(self, routing):
        cache = DictCache()
        estimator = QuoteEstimator(SHOP, POLICY, routing, cache=cache)

        first = await estimator.estimate(PICKUP)
        second = await estimator.estimate(PICKUP)

        assert first == second
        assert len(routing.calls) == 1
        assert PICKUP in cache.store

    @pytest.mark.asyncio
    async def test_fallback_is_not_cached(self):
        cache = DictCache()
        routing = FakeRouting(error=RoutingUnavailable("down"))
        estimator = QuoteEstimator(SHOP, POLICY, routing, cache=cache)

        await estimator.estimate(PICKUP)
        await estimator.estimate(PICKUP)

        assert cache.store == {}
        assert len(routing.calls) == 2


class HangingCache:
    def __init__(self, hang_on: str, delay: float = 5.0):
        self.hang_on = hang_on
        self.delay = delay
        self.store: dict[Coordinate, RoutedDistance] = {}

    async def get(self, pickup: Coordinate) -> Optional[RoutedDistance]:
        if self.hang_on == "get":
            await asyncio.sleep(self.delay)
        return self.store.get(pickup)

    async def set(self, pickup: Coordinate, routed: RoutedDistance) -> None:
        if self.hang_on == "set":
            await asyncio.sleep(self.delay)
        self.store[pickup] = routed


class TestSlowCache:
    @pytest.mark.asyncio
    async def test_hanging_lookup_is_a_miss(self, routing):
        estimator = QuoteEstimator(
            SHOP,
            POLICY,
            routing,
            cache=HangingCache("get"),
            cache_timeout_seconds=0.05,
        )
        loop = asyncio.get_running_loop()
        started = loop.time()
        result = await estimator.estimate(PICKUP)

        assert loop.time() - started < 1.0
        assert result.source == DistanceSource.ROUTED
        assert len(routing.calls) == 1

    @pytest.mark.asyncio
    async def test_hanging_store_keeps_routed_result(self, routing):
        estimator = QuoteEstimator(
            SHOP,
            POLICY,
            routing,
            cache=HangingCache("set"),
            cache_timeout_seconds=0.05,
        )
        loop = asyncio.get_running_loop()
        started = loop.time()
        result = await estimator.estimate(PICKUP)

        assert loop.time() - started < 1.0
        assert result.source == DistanceSource.ROUTED
        assert result.cost == 325.0

    @pytest.mark.asyncio
    async def test_hanging_cache_and_routing_still_bounded(self):
        estimator = QuoteEstimator(
            SHOP,
            POLICY,
            SlowRouting(delay=5.0),
            timeout_seconds=0.1,
            cache=HangingCache("get"),
            cache_timeout_seconds=0.05,
        )
        loop = asyncio.get_running_loop()
        started = loop.time()
        result = await estimator.estimate(PICKUP)

        assert loop.time() - started < 1.0
        assert result.source == DistanceSource.GEODESIC


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_estimates_do_not_interfere(self):
        pickups = [Coordinate(43.6 + i * 0.05, -79.4) for i in range(10)]
        estimator = QuoteEstimator(
            SHOP, POLICY, FakeRouting(error=RoutingUnavailable("down"))
        )

        results = await asyncio.gather(*(estimator.estimate(p) for p in pickups))

        for pickup, result in zip(pickups, results):
            assert result.distance_km == pytest.approx(
                great_circle_distance_km(pickup, SHOP.coordinate)
            )

    @pytest.mark.asyncio
    async def test_cancelled_estimate_propagates_cancellation(self):
        estimator = QuoteEstimator(
            SHOP, POLICY, SlowRouting(delay=5.0), timeout_seconds=10.0
        )
        task = asyncio.create_task(estimator.estimate(PICKUP))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
