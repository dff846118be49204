from __future__ import annotations

import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

import phonenumbers
from pydantic import BaseModel, Field, field_validator, model_validator

from models.enums import MessageTemplate, PropertyStatus, ResponseKind, RoleName
from models.utils import clean_phone_number


def _to_e164(value: str) -> str:
    try:
        parsed = phonenumbers.parse(clean_phone_number(value), None)
    except phonenumbers.NumberParseException:
        raise ValueError("Invalid phone number format. Use e.g. +14155238886")
    if not phonenumbers.is_valid_number(parsed):
        raise ValueError("Invalid phone number. Use full international format.")
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


class InboundMessage(BaseModel):
    text: str = ""
    sender_id: str
    sender_display_name: Optional[str] = None
    media_count: int = 0
    media_url: Optional[str] = None
    media_content_type: Optional[str] = None
    message_sid: Optional[str] = None

    @field_validator("text", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return value or ""

    @field_validator("media_count", mode="before")
    @classmethod
    def parse_media_count(cls, value):
        try:
            return int(value or 0)
        except (TypeError, ValueError):
            return 0

    @property
    def phone_number(self) -> str:
        return clean_phone_number(self.sender_id)


class ResponseDescriptor(BaseModel):
    kind: ResponseKind = ResponseKind.TEXT
    content: str
    media_url: Optional[str] = None

    @model_validator(mode="after")
    def media_needs_url(self):
        if self.kind == ResponseKind.MEDIA and not self.media_url:
            raise ValueError("Media responses require a media_url")
        return self

    @classmethod
    def text(cls, content: str) -> "ResponseDescriptor":
        return cls(kind=ResponseKind.TEXT, content=content)


class SendMessageRequest(BaseModel):
    to: str
    message: str = Field(..., min_length=1)
    media_url: Optional[str] = None

    @field_validator("to")
    @classmethod
    def validate_to(cls, value: str) -> str:
        return _to_e164(value)


class SendTemplateRequest(BaseModel):
    to: str
    template: MessageTemplate
    parameters: List[str] = Field(default_factory=list)

    @field_validator("to")
    @classmethod
    def validate_to(cls, value: str) -> str:
        return _to_e164(value)


class DeliveryReceipt(BaseModel):
    success: bool = True
    message_id: str
    status: Optional[str] = None
    to: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")

    model_config = {"populate_by_name": True}


class MessageStatusOut(BaseModel):
    sid: str
    status: Optional[str] = None
    error_code: Optional[int] = None
    error_message: Optional[str] = None
    date_created: Optional[str] = None
    date_sent: Optional[str] = None
    date_updated: Optional[str] = None


class SearchOptions(BaseModel):
    limit: Optional[int] = Field(default=None, ge=1)
    offset: Optional[int] = Field(default=None, ge=0)
    order_by: str = "created_at"
    ascending: bool = True


class PropertySearchCriteria(BaseModel):
    status: Optional[PropertyStatus] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    min_bedrooms: Optional[int] = None
    max_bedrooms: Optional[int] = None
    min_bathrooms: Optional[int] = None
    max_bathrooms: Optional[int] = None
    min_area: Optional[Decimal] = None
    max_area: Optional[Decimal] = None
    district_id: Optional[uuid.UUID] = None
    apartment_type_id: Optional[uuid.UUID] = None
    owner_id: Optional[uuid.UUID] = None
    agent_id: Optional[uuid.UUID] = None
    available_from: Optional[date] = None
    furnished: Optional[bool] = None
    elevator: Optional[bool] = None
    air_conditioning: Optional[bool] = None
    work_room: Optional[bool] = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class PropertyCreate(BaseModel):
    owner_id: uuid.UUID
    agent_id: Optional[uuid.UUID] = None
    address: str = Field(..., min_length=3, max_length=255)
    price: Decimal = Field(..., ge=0)
    status: PropertyStatus = PropertyStatus.ACTIVE
    description: Optional[str] = None
    bedrooms: Optional[int] = Field(default=None, ge=0, le=50)
    bathrooms: Optional[int] = Field(default=None, ge=0, le=50)
    area: Optional[Decimal] = Field(default=None, gt=0)
    neighborhood: Optional[str] = None
    floor: Optional[str] = None
    elevator: bool = False
    furnished: bool = False
    air_conditioning: bool = False
    work_room: bool = False
    property_link: Optional[str] = None
    built_year: Optional[str] = None
    available_from: Optional[date] = None
    district_id: Optional[uuid.UUID] = None
    type_id: Optional[uuid.UUID] = None

    @field_validator("address", "neighborhood", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return " ".join(value.split())
        return value

    @field_validator("property_link")
    @classmethod
    def validate_link(cls, value: Optional[str]):
        if value and not value.startswith(("http://", "https://")):
            raise ValueError("Property link must be an http(s) URL")
        return value


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    role: Optional[RoleName] = None


class PreferenceFields(BaseModel):
    preferred_location: Optional[str] = None
    preferred_neighborhood: Optional[str] = None
    budget_min: Optional[Decimal] = Field(default=None, ge=0)
    budget_max: Optional[Decimal] = Field(default=None, ge=0)
    bedrooms_min: Optional[int] = Field(default=None, ge=0)
    bedrooms_max: Optional[int] = Field(default=None, ge=0)
    bathrooms_min: Optional[int] = Field(default=None, ge=0)
    bathrooms_max: Optional[int] = Field(default=None, ge=0)
    area_min: Optional[Decimal] = Field(default=None, ge=0)
    area_max: Optional[Decimal] = Field(default=None, ge=0)
    urgency_in_weeks: Optional[Decimal] = None


class TimeSlotIn(BaseModel):
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def start_before_end(self):
        if self.start_time >= self.end_time:
            raise ValueError("Start time must be before end time")
        return self


class RoleOut(BaseModel):
    id: uuid.UUID
    role: str
    model_config = {"from_attributes": True}


class UserOut(BaseModel):
    id: uuid.UUID
    phone_number: str
    name: Optional[str] = None
    onboarded: bool = False
    role: Optional[RoleOut] = None
    created_at: datetime
    model_config = {"from_attributes": True}


class TimeSlotOut(BaseModel):
    id: uuid.UUID
    start_time: time
    end_time: time
    model_config = {"from_attributes": True}


class AppointmentOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    viewing_time_slot_id: uuid.UUID
    appointment_date: date
    time_slot: Optional[TimeSlotOut] = None
    created_at: datetime
    model_config = {"from_attributes": True}


class AppointmentStats(BaseModel):
    total: int = 0
    upcoming: int = 0
    past: int = 0
    today: int = 0


class PropertyStats(BaseModel):
    total: int = 0
    active: int = 0
    pending: int = 0
    rented: int = 0
    sold: int = 0
    unavailable: int = 0
    inactive: int = 0


class UserStats(BaseModel):
    total: int = 0
    renters: int = 0
    agents: int = 0
    owners: int = 0


class SystemStats(BaseModel):
    users: UserStats
    properties: PropertyStats
    appointments: AppointmentStats
    timestamp: datetime
