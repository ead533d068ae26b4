"""
OSRM routing client.

Talks to an OSRM ``/route`` endpoint over HTTP and normalises the answer
into a ``RoutedDistance``.  Every failure mode (transport error, HTTP error,
non-``Ok`` code, empty route list, malformed JSON) is reported as
``RoutingUnavailable`` so the quote workflow can fall back to the
great-circle distance.

OSRM expects ``lon,lat`` ordering; the rest of the code base uses
``(lat, lng)``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.domain.entities import Coordinate, RoutedDistance, RoutingUnavailable

logger = logging.getLogger(__name__)


def format_duration(seconds: float) -> str:
    """Directions-provider style duration text, e.g. ``"1 hour 5 mins"``."""
    minutes = max(1, int(seconds / 60 + 0.5))  # half up
    hours, minutes = divmod(minutes, 60)
    parts = []
    if hours:
        parts.append(f"{hours} hour" if hours == 1 else f"{hours} hours")
    if minutes:
        parts.append(f"{minutes} min" if minutes == 1 else f"{minutes} mins")
    return " ".join(parts)


class OSRMRoutingClient:
    def __init__(
        self,
        base_url: str,
        profile: str = "driving",
        timeout: float = 8.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _format_coordinates(*coords: Coordinate) -> str:
        return ";".join(f"{c.longitude},{c.latitude}" for c in coords)

    async def route(
        self, origin: Coordinate, destination: Coordinate
    ) -> RoutedDistance:
        url = (
            f"{self.base_url}/route/v1/{self.profile}/"
            f"{self._format_coordinates(origin, destination)}"
        )
        try:
            response = await self._client.get(
                url, params={"overview": "simplified", "geometries": "geojson"}
            )
            data: dict[str, Any] = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RoutingUnavailable(f"routing request failed: {exc}") from exc

        if response.status_code != 200 or data.get("code") != "Ok":
            raise RoutingUnavailable(
                f"routing error {response.status_code}: "
                f"{data.get('code')} {data.get('message', '')}".strip()
            )

        routes = data.get("routes") or []
        if not routes:
            raise RoutingUnavailable("no route found")

        route = routes[0]
        try:
            distance_m = float(route["distance"])
            duration_s = float(route["duration"])
            geometry = route.get("geometry") or {}
            path = tuple(
                (float(lat), float(lng))
                for lng, lat in geometry.get("coordinates", [])
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise RoutingUnavailable(f"malformed route: {exc}") from exc

        logger.debug(
            "Routed %.1f m / %.0f s with %d path points",
            distance_m,
            duration_s,
            len(path),
        )
        return RoutedDistance(
            distance_km=distance_m / 1000,
            duration_text=format_duration(duration_s),
            path=path,
        )
