"""
Contact form endpoints
======================

POST   /api/v1/contact       -- submit a message (public)
GET    /api/v1/contact       -- list messages (admin)
DELETE /api/v1/contact/{id}  -- delete a message (admin)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.middleware import limiter
from src.api.schemas import (
    ContactCreateRequest,
    ContactEnvelope,
    ContactListResponse,
    ErrorResponse,
    MessageResponse,
)
from src.api.security import require_admin
from src.infrastructure.repositories import ContactRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["contact"])

SUCCESS_MESSAGE = "Thank you for contacting us! We will get back to you soon."


@router.post(
    "",
    status_code=201,
    response_model=ContactEnvelope,
    summary="Submit the contact form",
)
@limiter.limit("30/minute")
async def submit_contact(
    request: Request,
    body: ContactCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    if body.website:
        logger.warning("Honeypot triggered on contact form; discarding")
        return {"message": SUCCESS_MESSAGE, "contact": None}

    contact = await ContactRepository(db).create_contact(
        name=body.name,
        email=body.email,
        phone=body.phone or None,
        message=body.message,
    )
    logger.info("Contact message %s saved", contact.id)
    return {"message": SUCCESS_MESSAGE, "contact": contact}


@router.get(
    "",
    response_model=ContactListResponse,
    summary="List contact messages",
    dependencies=[Depends(require_admin)],
)
async def list_contacts(db: AsyncSession = Depends(get_db)):
    contacts = await ContactRepository(db).list_all()
    logger.info("Fetched %d contact submissions", len(contacts))
    return {"contacts": contacts}


@router.delete(
    "/{contact_id}",
    response_model=MessageResponse,
    summary="Delete a contact message",
    responses={404: {"model": ErrorResponse}},
    dependencies=[Depends(require_admin)],
)
async def delete_contact(contact_id: int, db: AsyncSession = Depends(get_db)):
    repo = ContactRepository(db)
    contact = await repo.get_by_id(contact_id)
    if not contact:
        raise HTTPException(status_code=404, detail="Contact not found.")
    await repo.delete(contact)
    logger.info("Contact deleted: %s", contact_id)
    return {"message": "Contact deleted successfully"}
