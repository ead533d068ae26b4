"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.domain.enums import (
    AppointmentStatus,
    AuthProvider,
    DistanceSource,
    UserRole,
    VehicleType,
)

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ── Requests ──────────────────────────────────────────────────────────


class _Form(BaseModel):
    model_config = {"str_strip_whitespace": True}


class RegisterRequest(_Form):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., max_length=255, pattern=_EMAIL_PATTERN)
    password: str = Field(..., min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=40)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()


class LoginRequest(_Form):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()


class AppointmentCreateRequest(_Form):
    name: str = Field(..., min_length=1, max_length=120)
    phone: str = Field(..., min_length=1, max_length=40)
    service: str = Field(..., min_length=1, max_length=120)
    email: Optional[str] = Field(None, max_length=255)
    preferred_date: Optional[datetime] = None
    message: Optional[str] = Field(None, max_length=5000)
    website: Optional[str] = Field(
        None, description="Honeypot field; must be left empty by humans."
    )


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class ContactCreateRequest(_Form):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., max_length=255, pattern=_EMAIL_PATTERN)
    message: str = Field(..., min_length=1, max_length=5000)
    phone: Optional[str] = Field(None, max_length=40)
    website: Optional[str] = Field(
        None, description="Honeypot field; must be left empty by humans."
    )


class QuoteRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class TowingRequestCreate(_Form):
    name: str = Field(..., min_length=1, max_length=120)
    phone: str = Field(..., min_length=1, max_length=40)
    email: Optional[str] = Field(None, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    vehicle_type: VehicleType = VehicleType.CAR
    issue: Optional[str] = Field(None, max_length=2000)
    urgent: bool = False
    website: Optional[str] = Field(
        None, description="Honeypot field; must be left empty by humans."
    )


# ── Responses ─────────────────────────────────────────────────────────


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: UserRole
    auth_provider: AuthProvider
    profile_picture: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserResponse


class MeResponse(BaseModel):
    user: UserResponse


class UserListResponse(BaseModel):
    users: list[UserResponse]


class AppointmentResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    name: str
    email: Optional[str] = None
    phone: str
    service: str
    preferred_date: Optional[datetime] = None
    message: Optional[str] = None
    status: AppointmentStatus
    location: Optional[str] = None
    pickup_lat: Optional[float] = None
    pickup_lng: Optional[float] = None
    distance_km: Optional[float] = None
    estimated_cost: Optional[float] = None
    vehicle_type: Optional[str] = None
    urgent: bool = False
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AppointmentEnvelope(BaseModel):
    message: str
    appointment: Optional[AppointmentResponse] = None


class AppointmentListResponse(BaseModel):
    appointments: list[AppointmentResponse]


class ContactResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ContactEnvelope(BaseModel):
    message: str
    contact: Optional[ContactResponse] = None


class ContactListResponse(BaseModel):
    contacts: list[ContactResponse]


class QuoteResponse(BaseModel):
    distance_km: float
    cost: float
    extra_km: float
    extra_cost: float
    source: DistanceSource
    duration_text: Optional[str] = None
    distance_display: str = Field(..., description='Distance as "%.1f" km.')
    cost_display: str = Field(..., description='Cost as "%.2f".')
    path: list[tuple[float, float]] = []


class PricingPolicyResponse(BaseModel):
    base_rate: float
    base_distance_km: float
    per_km_rate: float


class ShopResponse(BaseModel):
    name: str
    address: str
    phone: str
    latitude: float
    longitude: float
    pricing: PricingPolicyResponse


class TowingRequestResponse(BaseModel):
    message: str
    appointment: Optional[AppointmentResponse] = None
    quote: Optional[QuoteResponse] = None


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    database: str = "connected"
    timestamp: datetime


class ErrorResponse(BaseModel):
    detail: str
