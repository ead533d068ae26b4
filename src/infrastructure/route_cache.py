"""
Redis cache for routed distances.

The shop is fixed, so a route is identified by its pickup point alone.
Pickups are bucketed into fine H3 hexagons (resolution 11, ~25 m edge) so
that a customer nudging the map marker a few metres reuses the previous
answer instead of hitting the routing service again.

Only successful routes are cached.  A Redis failure or an unreadable entry
is logged and treated as a miss; it never fails a quote.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import h3
import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.domain.entities import Coordinate, RoutedDistance

logger = logging.getLogger(__name__)


def pickup_h3_cell(pickup: Coordinate, resolution: int = 11) -> str:
    """Map a pickup point to an H3 hexagonal cell index.  O(1)."""
    return h3.latlng_to_cell(pickup.latitude, pickup.longitude, resolution)


class RedisRouteCache:
    def __init__(
        self,
        client: aioredis.Redis,
        ttl_seconds: int = 3600,
        resolution: int = 11,
    ):
        self.redis = client
        self.ttl = ttl_seconds
        self.resolution = resolution

    def _key(self, pickup: Coordinate) -> str:
        return f"route:{pickup_h3_cell(pickup, self.resolution)}"

    async def get(self, pickup: Coordinate) -> Optional[RoutedDistance]:
        try:
            raw = await self.redis.get(self._key(pickup))
        except RedisError:
            logger.warning("Route cache read failed", exc_info=True)
            return None
        if raw is None:
            return None

        try:
            data = json.loads(raw)
            return RoutedDistance(
                distance_km=float(data["distance_km"]),
                duration_text=data["duration_text"],
                path=tuple(tuple(p) for p in data.get("path", [])),
            )
        except (ValueError, KeyError, TypeError, AttributeError):
            logger.warning("Discarding unreadable route cache entry %r", raw[:80])
            return None

    async def set(self, pickup: Coordinate, routed: RoutedDistance) -> None:
        payload = json.dumps(
            {
                "distance_km": routed.distance_km,
                "duration_text": routed.duration_text,
                "path": [list(p) for p in routed.path],
            }
        )
        try:
            await self.redis.set(self._key(pickup), payload, ex=self.ttl)
        except RedisError:
            logger.warning("Route cache write failed", exc_info=True)
