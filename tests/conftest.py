"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  ``users`` and ``contacts`` use the production
models directly; ``appointments`` is mirrored by a test model that stores
the PostGIS pickup point as WKT text (SQLite has no Geometry type).

The routing service is replaced by ``FakeRouting`` so no test talks to a
real OSRM server.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    Text,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from src.domain.entities import (
    Coordinate,
    PricingPolicy,
    RoutedDistance,
    RoutingUnavailable,
    ShopLocation,
)
from src.domain.enums import AppointmentStatus, UserRole
from src.domain.quotes import QuoteEstimator
from src.infrastructure.database import Base
from src.infrastructure.models import ContactModel, UserModel, _utcnow
from src.infrastructure.repositories import AppointmentRepository


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
TestSessionFactory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


class TestBase(DeclarativeBase):
    pass


# Mirror of AppointmentModel without the PostGIS Geometry column.

class TestAppointmentModel(TestBase):
    __tablename__ = "appointments"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(40), nullable=False)
    service = Column(String(120), nullable=False)
    preferred_date = Column(DateTime, nullable=True)
    message = Column(Text, nullable=True)
    status = Column(String(20), default=AppointmentStatus.PENDING.value, nullable=False)
    location = Column(String(255), nullable=True)
    pickup_point = Column(String, nullable=True)  # stub for Geometry
    pickup_lat = Column(Float, nullable=True)
    pickup_lng = Column(Float, nullable=True)
    distance_km = Column(Float, nullable=True)
    estimated_cost = Column(Float, nullable=True)
    vehicle_type = Column(String(40), nullable=True)
    urgent = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


class TestAppointmentRepository(AppointmentRepository):
    """``AppointmentRepository`` pointed at the SQLite-friendly mirror."""

    model = TestAppointmentModel

    @staticmethod
    def _point(lat: float, lng: float) -> str:
        return f"POINT({lng} {lat})"


# ── Quote estimator collaborators ─────────────────────────────────────

SHOP = ShopLocation(
    coordinate=Coordinate(43.6532, -79.3832),
    name="Test Garage",
    address="1 Test St, Toronto, ON",
    phone="+10000000000",
)
POLICY = PricingPolicy(base_rate=100.0, base_distance_km=10.0, per_km_rate=15.0)


class FakeRouting:
    """Routing service double: returns ``routed`` or raises ``error``."""

    def __init__(
        self,
        routed: Optional[RoutedDistance] = None,
        error: Optional[Exception] = None,
    ):
        self.routed = routed
        self.error = error
        self.calls: list[tuple[Coordinate, Coordinate]] = []

    async def route(self, origin: Coordinate, destination: Coordinate) -> RoutedDistance:
        self.calls.append((origin, destination))
        if self.error is not None:
            raise self.error
        if self.routed is None:
            raise RoutingUnavailable("no route found")
        return self.routed


@pytest.fixture
def routing() -> FakeRouting:
    return FakeRouting(
        routed=RoutedDistance(
            distance_km=25.0,
            duration_text="28 mins",
            path=((43.70, -79.40), (43.6532, -79.3832)),
        )
    )


@pytest.fixture
def estimator(routing: FakeRouting) -> QuoteEstimator:
    return QuoteEstimator(SHOP, POLICY, routing, timeout_seconds=1.0)


# ── Database / API fixtures ───────────────────────────────────────────


async def _create_tables() -> None:
    async with test_engine.begin() as conn:
        await conn.run_sync(
            lambda sync_conn: Base.metadata.create_all(
                sync_conn, tables=[UserModel.__table__, ContactModel.__table__]
            )
        )
        await conn.run_sync(TestBase.metadata.create_all)


async def _drop_tables() -> None:
    async with test_engine.begin() as conn:
        await conn.run_sync(TestBase.metadata.drop_all)
        await conn.run_sync(
            lambda sync_conn: Base.metadata.drop_all(
                sync_conn, tables=[UserModel.__table__, ContactModel.__table__]
            )
        )


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield a session, then drop everything."""
    await _create_tables()
    async with TestSessionFactory() as session:
        yield session
    await _drop_tables()


@pytest_asyncio.fixture
async def client(estimator: QuoteEstimator) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by SQLite + test models and a fake router."""
    await _create_tables()

    with (
        patch(
            "src.api.routes.appointments.AppointmentRepository",
            TestAppointmentRepository,
        ),
        patch(
            "src.api.routes.towing.AppointmentRepository",
            TestAppointmentRepository,
        ),
    ):
        async def _test_db():
            async with TestSessionFactory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        from src.api.app import create_app
        from src.api.dependencies import get_db, get_quote_estimator
        from src.api.middleware import limiter

        limiter.reset()
        app = create_app()
        app.dependency_overrides[get_db] = _test_db
        app.dependency_overrides[get_quote_estimator] = lambda: estimator

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac

    await _drop_tables()


async def _insert_user(email: str, role: UserRole) -> UserModel:
    from src.api.security import hash_password

    async with TestSessionFactory() as session:
        user = UserModel(
            name=email.split("@")[0].title(),
            email=email,
            password_hash=hash_password("secret123"),
            role=role,
        )
        session.add(user)
        await session.commit()
        return user


@pytest_asyncio.fixture
async def admin_headers(client: AsyncClient) -> dict[str, str]:
    from src.api.security import create_access_token

    admin = await _insert_user("boss@example.com", UserRole.ADMIN)
    token = create_access_token(admin.id, admin.email, UserRole.ADMIN)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def customer_headers(client: AsyncClient) -> dict[str, str]:
    from src.api.security import create_access_token

    customer = await _insert_user("jane@example.com", UserRole.CUSTOMER)
    token = create_access_token(customer.id, customer.email, UserRole.CUSTOMER)
    return {"Authorization": f"Bearer {token}"}
