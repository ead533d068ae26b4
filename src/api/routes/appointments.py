"""
Appointment endpoints
=====================

POST   /api/v1/appointments       -- book a service (public)
GET    /api/v1/appointments/my    -- appointments of the token holder
GET    /api/v1/appointments       -- all appointments (admin)
PATCH  /api/v1/appointments/{id}  -- change status (admin)
DELETE /api/v1/appointments/{id}  -- delete (admin)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.middleware import limiter
from src.api.schemas import (
    AppointmentCreateRequest,
    AppointmentEnvelope,
    AppointmentListResponse,
    AppointmentStatusUpdate,
    ErrorResponse,
    MessageResponse,
)
from src.api.security import get_current_user, get_optional_user, require_admin
from src.domain.entities import Appointment, InvalidStateTransition
from src.domain.enums import AppointmentStatus
from src.infrastructure.repositories import AppointmentRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])

SUCCESS_MESSAGE = "Appointment request submitted successfully!"


@router.post(
    "",
    status_code=201,
    response_model=AppointmentEnvelope,
    summary="Book an appointment",
)
@limiter.limit("30/minute")
async def create_appointment(
    request: Request,
    body: AppointmentCreateRequest,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_optional_user),
):
    if body.website:
        logger.warning("Honeypot triggered on appointment form; discarding")
        return {"message": SUCCESS_MESSAGE, "appointment": None}

    appointment = await AppointmentRepository(db).create_appointment(
        name=body.name,
        phone=body.phone,
        service=body.service,
        email=body.email or None,
        preferred_date=body.preferred_date,
        message=body.message or None,
        user_id=user.id if user else None,
    )
    logger.info("Appointment %s created for service %r", appointment.id, body.service)
    return {"message": SUCCESS_MESSAGE, "appointment": appointment}


@router.get(
    "/my",
    response_model=AppointmentListResponse,
    summary="List my appointments",
)
async def my_appointments(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    appointments = await AppointmentRepository(db).list_for_user(user.id)
    return {"appointments": appointments}


@router.get(
    "",
    response_model=AppointmentListResponse,
    summary="List all appointments",
    dependencies=[Depends(require_admin)],
)
async def list_appointments(db: AsyncSession = Depends(get_db)):
    appointments = await AppointmentRepository(db).list_all()
    logger.info("Fetched %d appointments", len(appointments))
    return {"appointments": appointments}


@router.patch(
    "/{appointment_id}",
    response_model=AppointmentEnvelope,
    summary="Change appointment status",
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    description=(
        "pending -> confirmed | cancelled, confirmed -> completed | cancelled. "
        "Completed and cancelled appointments are final."
    ),
    dependencies=[Depends(require_admin)],
)
async def update_appointment_status(
    appointment_id: int,
    body: AppointmentStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    row = await AppointmentRepository(db).get_by_id(appointment_id)
    if not row:
        raise HTTPException(status_code=404, detail="Appointment not found.")

    appointment = Appointment(id=row.id, status=AppointmentStatus(row.status))
    try:
        appointment.transition_to(body.status)
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    row.status = appointment.status
    await db.flush()
    logger.info("Appointment %s -> %s", appointment_id, appointment.status.value)
    return {"message": "Appointment updated", "appointment": row}


@router.delete(
    "/{appointment_id}",
    response_model=MessageResponse,
    summary="Delete an appointment",
    responses={404: {"model": ErrorResponse}},
    dependencies=[Depends(require_admin)],
)
async def delete_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
):
    repo = AppointmentRepository(db)
    appointment = await repo.get_by_id(appointment_id)
    if not appointment:
        raise HTTPException(status_code=404, detail="Appointment not found.")
    await repo.delete(appointment)
    logger.info("Appointment deleted: %s", appointment_id)
    return {"message": "Appointment deleted successfully"}
