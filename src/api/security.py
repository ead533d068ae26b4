"""
Password hashing and JWT bearer authentication.

* Passwords are hashed with Argon2 via ``passlib``.
* Tokens are HS256 JWTs carrying ``sub`` (user id), ``email`` and ``role``.
  Customer tokens live 7 days, admin tokens 24 hours.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.config import settings
from src.domain.enums import UserRole
from src.infrastructure.repositories import UserRepository

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

_bearer = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Unrecognised or placeholder hash
        return False


def create_access_token(user_id: int, email: str, role: UserRole) -> str:
    minutes = (
        settings.admin_token_expire_minutes
        if role == UserRole.ADMIN
        else settings.customer_token_expire_minutes
    )
    expire_dt = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "role": role.value,
        "exp": expire_dt,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _decode_user_id(token: str) -> int:
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
        return int(payload["sub"])
    except (JWTError, KeyError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token.",
        )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    db: AsyncSession = Depends(get_db),
):
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided.",
        )
    user = await UserRepository(db).get_by_id(_decode_user_id(credentials.credentials))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found."
        )
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    db: AsyncSession = Depends(get_db),
):
    """Like ``get_current_user`` but anonymous callers get ``None``."""
    if credentials is None:
        return None
    try:
        user_id = _decode_user_id(credentials.credentials)
    except HTTPException:
        return None
    return await UserRepository(db).get_by_id(user_id)


async def require_admin(user=Depends(get_current_user)):
    if user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required."
        )
    return user
