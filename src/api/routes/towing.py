"""
Towing endpoints
================

GET  /api/v1/towing/shop      -- shop location and pricing policy
POST /api/v1/towing/quote     -- distance + cost estimate for a pickup point
POST /api/v1/towing/requests  -- book a tow; the quote is recomputed here

Clients never supply distance or cost: a booking always carries the
server's own estimate, so a request cannot be stored at $0 because the
browser failed to compute a distance.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, get_quote_estimator
from src.api.middleware import limiter
from src.api.schemas import (
    QuoteRequest,
    QuoteResponse,
    ShopResponse,
    TowingRequestCreate,
    TowingRequestResponse,
)
from src.api.security import get_optional_user
from src.domain.entities import Coordinate, QuoteResult
from src.domain.pricing import format_cost, format_distance_km
from src.domain.quotes import QuoteEstimator
from src.infrastructure.repositories import AppointmentRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/towing", tags=["towing"])

SUCCESS_MESSAGE = "Towing request received! We will contact you shortly."


def _quote_response(quote: QuoteResult) -> QuoteResponse:
    return QuoteResponse(
        distance_km=quote.distance_km,
        cost=quote.cost,
        extra_km=quote.extra_km,
        extra_cost=quote.extra_cost,
        source=quote.source,
        duration_text=quote.duration_text,
        distance_display=format_distance_km(quote.distance_km),
        cost_display=format_cost(quote.cost),
        path=list(quote.path),
    )


def _towing_message(body: TowingRequestCreate, quote: QuoteResult) -> str:
    return "\n".join(
        [
            "Towing Request:",
            f"Location: {body.location}",
            f"Coordinates: {body.latitude}, {body.longitude}",
            f"Distance: {format_distance_km(quote.distance_km)} km",
            f"Vehicle: {body.vehicle_type.value}",
            f"Estimated Cost: ${format_cost(quote.cost)}",
            f"Issue: {body.issue or 'Not specified'}",
            f"Urgent: {'YES' if body.urgent else 'No'}",
        ]
    )


@router.get("/shop", response_model=ShopResponse, summary="Shop location")
async def get_shop(estimator: QuoteEstimator = Depends(get_quote_estimator)):
    shop, policy = estimator.shop, estimator.policy
    return ShopResponse(
        name=shop.name,
        address=shop.address,
        phone=shop.phone,
        latitude=shop.coordinate.latitude,
        longitude=shop.coordinate.longitude,
        pricing={
            "base_rate": policy.base_rate,
            "base_distance_km": policy.base_distance_km,
            "per_km_rate": policy.per_km_rate,
        },
    )


@router.post(
    "/quote",
    response_model=QuoteResponse,
    summary="Estimate towing distance and cost",
    description=(
        "Uses the driving distance when the routing service answers in "
        "time, otherwise the straight-line distance (no duration)."
    ),
)
@limiter.limit("60/minute")
async def quote(
    request: Request,
    body: QuoteRequest,
    estimator: QuoteEstimator = Depends(get_quote_estimator),
):
    result = await estimator.estimate(Coordinate(body.latitude, body.longitude))
    return _quote_response(result)


@router.post(
    "/requests",
    status_code=201,
    response_model=TowingRequestResponse,
    summary="Request a tow",
)
@limiter.limit("20/minute")
async def create_towing_request(
    request: Request,
    body: TowingRequestCreate,
    db: AsyncSession = Depends(get_db),
    estimator: QuoteEstimator = Depends(get_quote_estimator),
    user=Depends(get_optional_user),
):
    if body.website:
        logger.warning("Honeypot triggered on towing form; discarding")
        return {"message": SUCCESS_MESSAGE}

    result = await estimator.estimate(Coordinate(body.latitude, body.longitude))

    appointment = await AppointmentRepository(db).create_towing_request(
        name=body.name,
        phone=body.phone,
        email=body.email or None,
        location=body.location,
        pickup_lat=body.latitude,
        pickup_lng=body.longitude,
        distance_km=float(format_distance_km(result.distance_km)),
        estimated_cost=float(format_cost(result.cost)),
        vehicle_type=body.vehicle_type.value,
        urgent=body.urgent,
        message=_towing_message(body, result),
        preferred_date=datetime.now(timezone.utc),
        user_id=user.id if user else None,
    )
    logger.info(
        "Towing request %s: %s km, $%s (%s)",
        appointment.id,
        format_distance_km(result.distance_km),
        format_cost(result.cost),
        result.source.value,
    )
    return {
        "message": SUCCESS_MESSAGE,
        "appointment": appointment,
        "quote": _quote_response(result),
    }
