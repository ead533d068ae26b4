"""
User administration endpoints (admin only)
==========================================

GET    /api/v1/users       -- list all users, newest first
DELETE /api/v1/users/{id}  -- delete a user
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.schemas import ErrorResponse, MessageResponse, UserListResponse
from src.api.security import require_admin
from src.infrastructure.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users", tags=["users"], dependencies=[Depends(require_admin)]
)


@router.get("", response_model=UserListResponse, summary="List users")
async def list_users(db: AsyncSession = Depends(get_db)):
    users = await UserRepository(db).list_all()
    logger.info("Fetched %d users", len(users))
    return {"users": users}


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete a user",
    responses={404: {"model": ErrorResponse}},
)
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)):
    repo = UserRepository(db)
    user = await repo.get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    await repo.delete(user)
    logger.info("User deleted: %s", user_id)
    return {"message": "User deleted successfully"}
