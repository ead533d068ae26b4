"""
Auth endpoints
==============

POST /api/v1/auth/register     -- create a customer account
POST /api/v1/auth/login        -- exchange email + password for a token
POST /api/v1/auth/admin-login  -- same, but only for admin accounts
GET  /api/v1/auth/me           -- profile of the token holder
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.middleware import limiter
from src.api.schemas import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
)
from src.api.security import (
    create_access_token,
    get_current_user,
    hash_password,
    verify_password,
)
from src.domain.enums import UserRole
from src.infrastructure.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    summary="Register a customer account",
    responses={400: {"model": ErrorResponse}},
)
@limiter.limit("20/minute")
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = UserRepository(db)
    if await repo.get_by_email(body.email):
        raise HTTPException(status_code=400, detail="Email already registered.")

    user = await repo.create_user(
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
        phone=body.phone,
    )
    logger.info("User registered: id=%s", user.id)
    return {
        "message": "User registered successfully",
        "token": create_access_token(user.id, user.email, user.role),
        "user": user,
    }


async def _authenticate(db: AsyncSession, email: str, password: str):
    user = await UserRepository(db).get_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in",
    responses={400: {"model": ErrorResponse}},
)
@limiter.limit("20/minute")
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await _authenticate(db, body.email, body.password)
    if user is None:
        logger.info("Failed login attempt")
        raise HTTPException(status_code=400, detail="Invalid email or password.")
    return {
        "message": "Login successful",
        "token": create_access_token(user.id, user.email, user.role),
        "user": user,
    }


@router.post(
    "/admin-login",
    response_model=AuthResponse,
    summary="Log in as shop admin",
    responses={401: {"model": ErrorResponse}},
)
@limiter.limit("10/minute")
async def admin_login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await _authenticate(db, body.email, body.password)
    if user is None or user.role != UserRole.ADMIN:
        logger.warning("Rejected admin login")
        raise HTTPException(status_code=401, detail="Invalid admin credentials")
    return {
        "message": "Admin login successful",
        "token": create_access_token(user.id, user.email, user.role),
        "user": user,
    }


@router.get("/me", response_model=MeResponse, summary="Current user profile")
async def me(user=Depends(get_current_user)):
    return {"user": user}
