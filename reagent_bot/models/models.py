import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.get_db import Base

from .enums import PropertyStatus
from .utils import utcnow


class UserRole(Base):
    __tablename__ = "user_roles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    role: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __str__(self):
        return self.role


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    phone_number: Mapped[str] = mapped_column(
        String(50), unique=True, index=True, nullable=False
    )
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("user_roles.id", ondelete="SET NULL"), nullable=True
    )
    onboarded: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    role: Mapped[Optional["UserRole"]] = relationship("UserRole", lazy="selectin")

    @property
    def role_name(self) -> str | None:
        return self.role.role if self.role else None

    def __str__(self):
        return self.name or self.phone_number


class Country(Base):
    __tablename__ = "countries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    country: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __str__(self):
        return self.country


class City(Base):
    __tablename__ = "cities"
    __table_args__ = (UniqueConstraint("city", "country_id", name="uq_city_country"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    country_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("countries.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    country: Mapped["Country"] = relationship("Country", lazy="selectin")

    def __str__(self):
        return self.city


class District(Base):
    __tablename__ = "districts"
    __table_args__ = (
        UniqueConstraint("district", "country_id", name="uq_district_country"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    district: Mapped[str] = mapped_column(String(255), nullable=False)
    country_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("countries.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    country: Mapped["Country"] = relationship("Country", lazy="selectin")

    def __str__(self):
        return self.district


class ApartmentType(Base):
    __tablename__ = "apartment_types"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    type: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __str__(self):
        return self.type


class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (CheckConstraint("price >= 0", name="ck_property_price"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    owner: Mapped["User"] = relationship(
        "User", foreign_keys=[owner_id], lazy="raise"
    )
    agent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    agent: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[agent_id], lazy="raise"
    )

    address: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    bedrooms: Mapped[Optional[int]] = mapped_column(Integer)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer)
    status: Mapped[PropertyStatus] = mapped_column(
        Enum(PropertyStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PropertyStatus.ACTIVE,
        index=True,
    )
    area: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    price_per_sqm: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    neighborhood: Mapped[Optional[str]] = mapped_column(Text)
    floor: Mapped[Optional[str]] = mapped_column(String(50))
    elevator: Mapped[bool] = mapped_column(Boolean, default=False)
    furnished: Mapped[bool] = mapped_column(Boolean, default=False)
    air_conditioning: Mapped[bool] = mapped_column(Boolean, default=False)
    work_room: Mapped[bool] = mapped_column(Boolean, default=False)
    property_link: Mapped[Optional[str]] = mapped_column(String(1000))
    built_year: Mapped[Optional[str]] = mapped_column(String(50))
    available_from: Mapped[Optional[date]] = mapped_column(Date)

    district_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("districts.id", ondelete="SET NULL"), nullable=True, index=True
    )
    district: Mapped[Optional["District"]] = relationship("District", lazy="selectin")
    type_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("apartment_types.id", ondelete="SET NULL"), nullable=True
    )
    apartment_type: Mapped[Optional["ApartmentType"]] = relationship(
        "ApartmentType", lazy="selectin"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    @property
    def features(self) -> list[str]:
        flags = [
            (self.furnished, "Furnished"),
            (self.elevator, "Elevator"),
            (self.air_conditioning, "AC"),
            (self.work_room, "Work Room"),
        ]
        return [label for enabled, label in flags if enabled]


class UserPreference(Base):
    __tablename__ = "user_preferences"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    preferred_location: Mapped[Optional[str]] = mapped_column(Text)
    preferred_neighborhood: Mapped[Optional[str]] = mapped_column(Text)
    budget_min: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    budget_max: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    bedrooms_min: Mapped[Optional[int]] = mapped_column(Integer)
    bedrooms_max: Mapped[Optional[int]] = mapped_column(Integer)
    bathrooms_min: Mapped[Optional[int]] = mapped_column(Integer)
    bathrooms_max: Mapped[Optional[int]] = mapped_column(Integer)
    area_min: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    area_max: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    urgency_in_weeks: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class ViewingTimeSlot(Base):
    __tablename__ = "viewing_time_slots"
    __table_args__ = (
        UniqueConstraint("start_time", "end_time", name="uq_time_slot_range"),
        CheckConstraint("start_time < end_time", name="ck_time_slot_order"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __str__(self):
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"


class ViewingAppointment(Base):
    __tablename__ = "viewing_appointments"
    __table_args__ = (
        UniqueConstraint(
            "viewing_time_slot_id", "appointment_date", name="uq_appointment_slot_date"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user: Mapped["User"] = relationship("User", lazy="raise")
    viewing_time_slot_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("viewing_time_slots.id", ondelete="CASCADE"), nullable=False
    )
    time_slot: Mapped["ViewingTimeSlot"] = relationship(
        "ViewingTimeSlot", lazy="selectin"
    )
    appointment_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
