"""
Towing Quote Workflow
=====================

1. **Routed distance** -- ask the routing service for a driving route from
   the pickup point to the shop, bounded by a timeout.
2. **Fallback**        -- on any routing failure use the great-circle
   distance for the same pair of points.  The remote call is never retried.
   Cache reads and writes have their own short timeout; a slow cache is
   a miss.
3. **Pricing**         -- feed the distance to the tiered pricing policy.

The estimator is stateless between calls: shop and policy are frozen value
objects and every call builds a fresh ``QuoteResult``, so one instance is
shared by all concurrent requests.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from .distance import great_circle_distance_km
from .entities import (
    Coordinate,
    PricingPolicy,
    QuoteResult,
    RoutedDistance,
    RoutingUnavailable,
    ShopLocation,
)
from .enums import DistanceSource
from .pricing import calculate_cost

logger = logging.getLogger(__name__)


class RoutingService(Protocol):
    async def route(
        self, origin: Coordinate, destination: Coordinate
    ) -> RoutedDistance:
        """Return the driving route or raise ``RoutingUnavailable``."""


class RouteCache(Protocol):
    async def get(self, pickup: Coordinate) -> Optional[RoutedDistance]: ...

    async def set(self, pickup: Coordinate, routed: RoutedDistance) -> None: ...


class QuoteEstimator:
    """High-level API used by the towing routes."""

    def __init__(
        self,
        shop: ShopLocation,
        policy: PricingPolicy,
        routing: RoutingService,
        timeout_seconds: float = 8.0,
        cache: Optional[RouteCache] = None,
        cache_timeout_seconds: float = 0.5,
    ):
        self.shop = shop
        self.policy = policy
        self.routing = routing
        self.timeout_seconds = timeout_seconds
        self.cache = cache
        self.cache_timeout_seconds = cache_timeout_seconds

    async def resolve_distance(self, pickup: Coordinate) -> RoutedDistance:
        """Driving distance pickup -> shop.  Raises ``RoutingUnavailable``."""
        cached = await self._cache_get(pickup)
        if cached is not None:
            return cached

        try:
            routed = await asyncio.wait_for(
                self.routing.route(pickup, self.shop.coordinate),
                timeout=self.timeout_seconds,
            )
        except RoutingUnavailable:
            raise
        except asyncio.TimeoutError as exc:
            raise RoutingUnavailable(
                f"routing timed out after {self.timeout_seconds:g}s"
            ) from exc
        except Exception as exc:
            logger.exception("Routing service raised unexpectedly")
            raise RoutingUnavailable(str(exc)) from exc

        await self._cache_set(pickup, routed)
        return routed

    async def _cache_get(self, pickup: Coordinate) -> Optional[RoutedDistance]:
        if self.cache is None:
            return None
        try:
            return await asyncio.wait_for(
                self.cache.get(pickup), timeout=self.cache_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning("Route cache lookup timed out; treating as a miss")
            return None

    async def _cache_set(self, pickup: Coordinate, routed: RoutedDistance) -> None:
        if self.cache is None:
            return
        try:
            await asyncio.wait_for(
                self.cache.set(pickup, routed), timeout=self.cache_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning("Route cache store timed out; result not cached")

    async def estimate(self, pickup: Coordinate) -> QuoteResult:
        try:
            routed = await self.resolve_distance(pickup)
        except RoutingUnavailable as exc:
            logger.warning(
                "Routing unavailable for (%.5f, %.5f), using great-circle "
                "distance: %s",
                pickup.latitude,
                pickup.longitude,
                exc,
            )
            distance = great_circle_distance_km(pickup, self.shop.coordinate)
            return self._quote(distance, DistanceSource.GEODESIC)

        return self._quote(
            routed.distance_km,
            DistanceSource.ROUTED,
            duration_text=routed.duration_text,
            path=routed.path,
        )

    def _quote(
        self,
        distance_km: float,
        source: DistanceSource,
        duration_text: Optional[str] = None,
        path: tuple[tuple[float, float], ...] = (),
    ) -> QuoteResult:
        distance_km = max(0.0, distance_km)
        breakdown = calculate_cost(distance_km, self.policy)
        return QuoteResult(
            distance_km=distance_km,
            cost=breakdown.cost,
            extra_km=breakdown.extra_km,
            extra_cost=breakdown.extra_cost,
            source=source,
            duration_text=duration_text,
            path=path,
        )
