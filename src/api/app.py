"""
FastAPI application factory.

* Registers routes for auth, users, appointments, contact, towing, health.
* Builds the shared quote estimator (routing client + optional Redis
  route cache) on startup and closes its connections on shutdown.
* Applies CORS and rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import appointments, auth, contact, health, towing, users
from src.config import settings
from src.domain.entities import (
    Coordinate,
    InvalidCoordinate,
    PricingPolicy,
    ShopLocation,
)
from src.domain.quotes import QuoteEstimator
from src.infrastructure import redis_client
from src.infrastructure.route_cache import RedisRouteCache
from src.infrastructure.routing import OSRMRoutingClient

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


def build_shop() -> ShopLocation:
    return ShopLocation(
        coordinate=Coordinate(settings.shop_lat, settings.shop_lng),
        name=settings.shop_name,
        address=settings.shop_address,
        phone=settings.shop_phone,
    )


def build_pricing_policy() -> PricingPolicy:
    return PricingPolicy(
        base_rate=settings.base_rate,
        base_distance_km=settings.base_distance_km,
        per_km_rate=settings.per_km_rate,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the routing client (and route cache) on startup; close on shutdown."""
    routing = OSRMRoutingClient(
        settings.routing_base_url,
        profile=settings.routing_profile,
        timeout=settings.routing_timeout_seconds,
    )
    cache = None
    if settings.route_cache_ttl_seconds > 0:
        cache = RedisRouteCache(
            redis_client.get_redis(),
            ttl_seconds=settings.route_cache_ttl_seconds,
            resolution=settings.route_cache_h3_resolution,
        )
    app.state.quote_estimator = QuoteEstimator(
        build_shop(),
        build_pricing_policy(),
        routing,
        timeout_seconds=settings.routing_timeout_seconds,
        cache=cache,
        cache_timeout_seconds=settings.route_cache_timeout_seconds,
    )
    logger.info(
        "Quote estimator ready (routing=%s, cache=%s)",
        settings.routing_base_url,
        "on" if cache else "off",
    )
    yield
    await routing.aclose()
    if cache is not None:
        await redis_client.close_redis()


async def _invalid_coordinate_handler(request: Request, exc: InvalidCoordinate):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Auto Shop & Towing API",
        description=(
            "Backend for an auto repair shop: customer accounts, service "
            "appointments, contact messages and towing quotes based on "
            "driving distance to the shop."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(InvalidCoordinate, _invalid_coordinate_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    # Routers
    for module in (auth, users, appointments, contact, towing, health):
        app.include_router(module.router, prefix="/api/v1")

    return app
