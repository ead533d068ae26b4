"""
SQLAlchemy ORM models  (maps to PostgreSQL + PostGIS).

Tables
------
* ``users``         -- customers and shop admins
* ``appointments``  -- service bookings, including towing requests
* ``contacts``      -- messages from the contact form

Indexes
-------
* **GIST** on ``appointments.pickup_point`` for towing pickups.
* **B-Tree** on ``status``, ``user_id`` and ``created_at`` for the
  "newest first" listings used by the admin dashboard.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from geoalchemy2 import Geometry

from .database import Base
from src.domain.enums import AppointmentStatus, AuthProvider, UserRole


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(40), nullable=True)
    role = Column(
        Enum(UserRole, values_callable=_enum_values),
        default=UserRole.CUSTOMER,
        nullable=False,
    )
    google_id = Column(String(64), unique=True, nullable=True)
    profile_picture = Column(String(512), nullable=True)
    auth_provider = Column(
        Enum(AuthProvider, values_callable=_enum_values),
        default=AuthProvider.LOCAL,
        nullable=False,
    )
    created_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (Index("idx_users_created", "created_at"),)


class AppointmentModel(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(40), nullable=False)
    service = Column(String(120), nullable=False)
    preferred_date = Column(DateTime(timezone=True), nullable=True)
    message = Column(Text, nullable=True)
    status = Column(
        Enum(AppointmentStatus, values_callable=_enum_values),
        default=AppointmentStatus.PENDING,
        nullable=False,
    )

    # Towing requests only
    location = Column(String(255), nullable=True)
    pickup_point = Column(
        Geometry("POINT", srid=4326, spatial_index=False), nullable=True
    )
    pickup_lat = Column(Float, nullable=True)
    pickup_lng = Column(Float, nullable=True)
    distance_km = Column(Float, nullable=True)
    estimated_cost = Column(Float, nullable=True)
    vehicle_type = Column(String(40), nullable=True)
    urgent = Column(Boolean, default=False, nullable=False)

    created_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
    )

    __table_args__ = (
        Index("idx_appointments_pickup", "pickup_point", postgresql_using="gist"),
        Index("idx_appointments_status", "status"),
        Index("idx_appointments_user", "user_id"),
        Index("idx_appointments_created", "created_at"),
    )


class ContactModel(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(40), nullable=True)
    message = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (Index("idx_contacts_created", "created_at"),)
