"""
Repository Pattern -- abstracts DB access so route handlers stay DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  The mapped class is a class attribute so a
repository can be pointed at a different model with the same columns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import AppointmentModel, ContactModel, UserModel
from src.domain.enums import AppointmentStatus, AuthProvider, UserRole


class UserRepository:
    model: Any = UserModel

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        phone: str | None = None,
        role: UserRole = UserRole.CUSTOMER,
        auth_provider: AuthProvider = AuthProvider.LOCAL,
    ):
        user = self.model(
            name=name,
            email=email,
            password_hash=password_hash,
            phone=phone,
            role=role,
            auth_provider=auth_provider,
        )
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: int):
        return await self.session.get(self.model, user_id)

    async def get_by_email(self, email: str):
        result = await self.session.execute(
            select(self.model).where(self.model.email == email)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list:
        result = await self.session.execute(
            select(self.model).order_by(
                self.model.created_at.desc(), self.model.id.desc()
            )
        )
        return list(result.scalars().all())

    async def delete(self, user) -> None:
        await self.session.delete(user)
        await self.session.flush()


class AppointmentRepository:
    model: Any = AppointmentModel

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _point(lat: float, lng: float) -> Any:
        from geoalchemy2.functions import ST_MakePoint, ST_SetSRID

        return ST_SetSRID(ST_MakePoint(lng, lat), 4326)

    async def create_appointment(
        self,
        *,
        name: str,
        phone: str,
        service: str,
        email: str | None = None,
        preferred_date: datetime | None = None,
        message: str | None = None,
        user_id: int | None = None,
    ):
        appointment = self.model(
            name=name,
            phone=phone,
            service=service,
            email=email,
            preferred_date=preferred_date,
            message=message,
            user_id=user_id,
            status=AppointmentStatus.PENDING,
        )
        self.session.add(appointment)
        await self.session.flush()
        return appointment

    async def create_towing_request(
        self,
        *,
        name: str,
        phone: str,
        email: str | None,
        location: str,
        pickup_lat: float,
        pickup_lng: float,
        distance_km: float,
        estimated_cost: float,
        vehicle_type: str,
        urgent: bool,
        message: str,
        preferred_date: datetime | None = None,
        user_id: int | None = None,
    ):
        """Create a towing booking with a PostGIS pickup point."""
        appointment = self.model(
            name=name,
            phone=phone,
            email=email,
            service="Towing Service",
            location=location,
            pickup_point=self._point(pickup_lat, pickup_lng),
            pickup_lat=pickup_lat,
            pickup_lng=pickup_lng,
            distance_km=distance_km,
            estimated_cost=estimated_cost,
            vehicle_type=vehicle_type,
            urgent=urgent,
            message=message,
            preferred_date=preferred_date,
            user_id=user_id,
            status=AppointmentStatus.PENDING,
        )
        self.session.add(appointment)
        await self.session.flush()
        return appointment

    async def get_by_id(self, appointment_id: int):
        return await self.session.get(self.model, appointment_id)

    async def list_all(self) -> list:
        result = await self.session.execute(
            select(self.model).order_by(
                self.model.created_at.desc(), self.model.id.desc()
            )
        )
        return list(result.scalars().all())

    async def list_for_user(self, user_id: int) -> list:
        result = await self.session.execute(
            select(self.model)
            .where(self.model.user_id == user_id)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
        )
        return list(result.scalars().all())

    async def delete(self, appointment) -> None:
        await self.session.delete(appointment)
        await self.session.flush()


class ContactRepository:
    model: Any = ContactModel

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_contact(
        self,
        *,
        name: str,
        email: str,
        message: str,
        phone: str | None = None,
    ):
        contact = self.model(name=name, email=email, phone=phone, message=message)
        self.session.add(contact)
        await self.session.flush()
        return contact

    async def get_by_id(self, contact_id: int) -> Optional[ContactModel]:
        return await self.session.get(self.model, contact_id)

    async def list_all(self) -> list:
        result = await self.session.execute(
            select(self.model).order_by(
                self.model.created_at.desc(), self.model.id.desc()
            )
        )
        return list(result.scalars().all())

    async def delete(self, contact) -> None:
        await self.session.delete(contact)
        await self.session.flush()
