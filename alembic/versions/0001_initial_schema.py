"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PROPERTY_STATUS = sa.Enum(
    "active",
    "pending",
    "rented",
    "sold",
    "unavailable",
    "inactive",
    name="propertystatus",
    native_enum=False,
)


def _created_at():
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_at():
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def upgrade():
    op.create_table(
        "user_roles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("role", sa.String(50), nullable=False, unique=True),
        _created_at(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("phone_number", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column(
            "role_id",
            sa.Uuid(),
            sa.ForeignKey("user_roles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("onboarded", sa.Boolean(), nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_users_phone_number", "users", ["phone_number"], unique=True)

    op.create_table(
        "countries",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("country", sa.String(255), nullable=False, unique=True),
        _created_at(),
    )

    op.create_table(
        "cities",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("city", sa.String(255), nullable=False),
        sa.Column(
            "country_id",
            sa.Uuid(),
            sa.ForeignKey("countries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _created_at(),
        sa.UniqueConstraint("city", "country_id", name="uq_city_country"),
    )

    op.create_table(
        "districts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("district", sa.String(255), nullable=False),
        sa.Column(
            "country_id",
            sa.Uuid(),
            sa.ForeignKey("countries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _created_at(),
        sa.UniqueConstraint("district", "country_id", name="uq_district_country"),
    )

    op.create_table(
        "apartment_types",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("type", sa.String(100), nullable=False, unique=True),
        _created_at(),
    )

    op.create_table(
        "properties",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "owner_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "agent_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Integer(), nullable=True),
        sa.Column("status", PROPERTY_STATUS, nullable=False),
        sa.Column("area", sa.Numeric(10, 2), nullable=True),
        sa.Column("price_per_sqm", sa.Numeric(12, 2), nullable=True),
        sa.Column("neighborhood", sa.Text(), nullable=True),
        sa.Column("floor", sa.String(50), nullable=True),
        sa.Column("elevator", sa.Boolean(), nullable=True),
        sa.Column("furnished", sa.Boolean(), nullable=True),
        sa.Column("air_conditioning", sa.Boolean(), nullable=True),
        sa.Column("work_room", sa.Boolean(), nullable=True),
        sa.Column("property_link", sa.String(1000), nullable=True),
        sa.Column("built_year", sa.String(50), nullable=True),
        sa.Column("available_from", sa.Date(), nullable=True),
        sa.Column(
            "district_id",
            sa.Uuid(),
            sa.ForeignKey("districts.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "type_id",
            sa.Uuid(),
            sa.ForeignKey("apartment_types.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("price >= 0", name="ck_property_price"),
    )
    op.create_index("ix_properties_owner_id", "properties", ["owner_id"])
    op.create_index("ix_properties_agent_id", "properties", ["agent_id"])
    op.create_index("ix_properties_status", "properties", ["status"])
    op.create_index("ix_properties_district_id", "properties", ["district_id"])
    op.create_index("ix_properties_created_at", "properties", ["created_at"])

    op.create_table(
        "user_preferences",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("preferred_location", sa.Text(), nullable=True),
        sa.Column("preferred_neighborhood", sa.Text(), nullable=True),
        sa.Column("budget_min", sa.Numeric(12, 2), nullable=True),
        sa.Column("budget_max", sa.Numeric(12, 2), nullable=True),
        sa.Column("bedrooms_min", sa.Integer(), nullable=True),
        sa.Column("bedrooms_max", sa.Integer(), nullable=True),
        sa.Column("bathrooms_min", sa.Integer(), nullable=True),
        sa.Column("bathrooms_max", sa.Integer(), nullable=True),
        sa.Column("area_min", sa.Numeric(10, 2), nullable=True),
        sa.Column("area_max", sa.Numeric(10, 2), nullable=True),
        sa.Column("urgency_in_weeks", sa.Numeric(5, 1), nullable=True),
        _created_at(),
        _updated_at(),
    )

    op.create_table(
        "viewing_time_slots",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        _created_at(),
        sa.UniqueConstraint("start_time", "end_time", name="uq_time_slot_range"),
        sa.CheckConstraint("start_time < end_time", name="ck_time_slot_order"),
    )

    op.create_table(
        "viewing_appointments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "viewing_time_slot_id",
            sa.Uuid(),
            sa.ForeignKey("viewing_time_slots.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        _created_at(),
        sa.UniqueConstraint(
            "viewing_time_slot_id", "appointment_date", name="uq_appointment_slot_date"
        ),
    )
    op.create_index(
        "ix_viewing_appointments_user_id", "viewing_appointments", ["user_id"]
    )
    op.create_index(
        "ix_viewing_appointments_appointment_date",
        "viewing_appointments",
        ["appointment_date"],
    )


def downgrade():
    op.drop_table("viewing_appointments")
    op.drop_table("viewing_time_slots")
    op.drop_table("user_preferences")
    op.drop_table("properties")
    op.drop_table("apartment_types")
    op.drop_table("districts")
    op.drop_table("cities")
    op.drop_table("countries")
    op.drop_table("users")
    op.drop_table("user_roles")
