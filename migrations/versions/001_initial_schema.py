"""Initial schema with PostGIS extension and all core tables.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Enable PostGIS extension
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column(
            "role",
            sa.Enum("customer", "admin", name="userrole"),
            default="customer",
            nullable=False,
        ),
        sa.Column("google_id", sa.String(64), unique=True, nullable=True),
        sa.Column("profile_picture", sa.String(512), nullable=True),
        sa.Column(
            "auth_provider",
            sa.Enum("local", "google", name="authprovider"),
            default="local",
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_users_created", "users", ["created_at"])

    # ── appointments ──────────────────────────────────────────────────
    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(40), nullable=False),
        sa.Column("service", sa.String(120), nullable=False),
        sa.Column("preferred_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "pending",
                "confirmed",
                "completed",
                "cancelled",
                name="appointmentstatus",
            ),
            default="pending",
            nullable=False,
        ),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column(
            "pickup_point",
            Geometry("POINT", srid=4326, spatial_index=False),
            nullable=True,
        ),
        sa.Column("pickup_lat", sa.Float, nullable=True),
        sa.Column("pickup_lng", sa.Float, nullable=True),
        sa.Column("distance_km", sa.Float, nullable=True),
        sa.Column("estimated_cost", sa.Float, nullable=True),
        sa.Column("vehicle_type", sa.String(40), nullable=True),
        sa.Column("urgent", sa.Boolean, default=False, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_appointments_pickup",
        "appointments",
        ["pickup_point"],
        postgresql_using="gist",
    )
    op.create_index("idx_appointments_status", "appointments", ["status"])
    op.create_index("idx_appointments_user", "appointments", ["user_id"])
    op.create_index("idx_appointments_created", "appointments", ["created_at"])

    # ── contacts ──────────────────────────────────────────────────────
    op.create_table(
        "contacts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_contacts_created", "contacts", ["created_at"])


def downgrade() -> None:
    op.drop_table("contacts")
    op.drop_table("appointments")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS appointmentstatus")
    op.execute("DROP TYPE IF EXISTS authprovider")
    op.execute("DROP TYPE IF EXISTS userrole")
