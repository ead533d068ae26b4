"""
Seed script -- creates the shop admin and a few sample records.

Run after migrations:
    python seed.py

Creates:
  - the admin account from ``ADMIN_EMAIL`` / ``ADMIN_PASSWORD``
  - 3 sample customers
  - 4 sample appointments (one of them a towing request)
  - 2 sample contact messages
"""

import asyncio

from sqlalchemy import text

from src.api.security import hash_password
from src.config import settings
from src.domain.entities import Coordinate
from src.domain.distance import great_circle_distance_km
from src.domain.enums import AppointmentStatus, UserRole
from src.domain.pricing import calculate_cost, format_cost, format_distance_km
from src.api.app import build_pricing_policy, build_shop
from src.infrastructure.database import async_session_factory, engine
from src.infrastructure.repositories import (
    AppointmentRepository,
    ContactRepository,
    UserRepository,
)

CUSTOMERS = [
    {"name": "Liam Tremblay", "email": "liam@example.com", "phone": "+14165550101"},
    {"name": "Olivia Chen", "email": "olivia@example.com", "phone": "+14165550102"},
    {"name": "Noah Singh", "email": "noah@example.com", "phone": "+14165550103"},
]

APPOINTMENTS = [
    {"customer": 0, "service": "Oil Change", "status": AppointmentStatus.CONFIRMED},
    {"customer": 1, "service": "Brake Inspection", "status": AppointmentStatus.PENDING},
    {"customer": 2, "service": "Tire Rotation", "status": AppointmentStatus.COMPLETED},
]

CONTACTS = [
    {
        "name": "Emma Roy",
        "email": "emma@example.com",
        "message": "Do you service hybrid vehicles?",
    },
    {
        "name": "Lucas Martin",
        "email": "lucas@example.com",
        "phone": "+14165550199",
        "message": "What are your weekend hours?",
    },
]

# Pickup in North York, roughly 13 km from downtown
TOW_PICKUP = Coordinate(43.7615, -79.4111)


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM users"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        users = UserRepository(session)
        appointments = AppointmentRepository(session)
        contacts = ContactRepository(session)

        # ── Users ─────────────────────────────────────────────────────
        await users.create_user(
            name="Admin",
            email=settings.admin_email.lower(),
            password_hash=hash_password(settings.admin_password),
            role=UserRole.ADMIN,
        )
        customers = []
        for c in CUSTOMERS:
            customers.append(
                await users.create_user(
                    name=c["name"],
                    email=c["email"],
                    phone=c["phone"],
                    password_hash=hash_password("password123"),
                )
            )
        print(f"  Created admin + {len(customers)} customers")

        # ── Appointments ──────────────────────────────────────────────
        for a in APPOINTMENTS:
            customer = customers[a["customer"]]
            row = await appointments.create_appointment(
                name=customer.name,
                phone=customer.phone,
                email=customer.email,
                service=a["service"],
                user_id=customer.id,
            )
            row.status = a["status"]

        distance = great_circle_distance_km(TOW_PICKUP, build_shop().coordinate)
        cost = calculate_cost(distance, build_pricing_policy()).cost
        await appointments.create_towing_request(
            name=customers[0].name,
            phone=customers[0].phone,
            email=customers[0].email,
            location="5100 Yonge St, North York, ON",
            pickup_lat=TOW_PICKUP.latitude,
            pickup_lng=TOW_PICKUP.longitude,
            distance_km=float(format_distance_km(distance)),
            estimated_cost=float(format_cost(cost)),
            vehicle_type="car",
            urgent=False,
            message="Towing Request:\nSeeded sample",
            user_id=customers[0].id,
        )
        await session.flush()
        print(f"  Created {len(APPOINTMENTS) + 1} appointments")

        # ── Contacts ──────────────────────────────────────────────────
        for c in CONTACTS:
            await contacts.create_contact(**c)
        print(f"  Created {len(CONTACTS)} contact messages")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
