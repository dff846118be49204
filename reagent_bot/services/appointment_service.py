import logging
import uuid
from datetime import date
from typing import Optional

from core.date_helper import DateHelper, date_helper
from core.errors import (
    ConstraintViolation,
    DuplicateBooking,
    NotFound,
    SlotUnavailable,
    Unauthorized,
)
from core.settings import settings
from core.store import AccessLevel, Store
from models.models import ViewingAppointment, ViewingTimeSlot
from models.utils import clean_phone_number
from repos.appointment_repo import AppointmentRepo
from repos.time_slot_repo import TimeSlotRepo
from repos.user_repo import UserRepo
from schemas.schema import AppointmentStats

logger = logging.getLogger(__name__)


class AppointmentService:
    def __init__(self, store: Store, dates: Optional[DateHelper] = None):
        self.repo: AppointmentRepo = AppointmentRepo(store)
        self.slots: TimeSlotRepo = TimeSlotRepo(store)
        self.users: UserRepo = UserRepo(store)
        self.dates: DateHelper = dates or date_helper

    async def _user_by_phone(self, phone_number: str):
        user = await self.users.find_by_phone_number(clean_phone_number(phone_number))
        if user is None:
            raise NotFound(f"User {phone_number} not found")
        return user

    async def _slot(self, time_slot_id: uuid.UUID) -> ViewingTimeSlot:
        slot = await self.slots.find_by_id(time_slot_id)
        if slot is None:
            raise NotFound(f"Time slot {time_slot_id} not found")
        return slot

    async def get_available_time_slots(self, on_date: date) -> list[ViewingTimeSlot]:
        slots = await self.slots.list_ordered()
        booked = await self.slots.booked_slot_ids(on_date)
        return [slot for slot in slots if slot.id not in booked]

    async def book_viewing_appointment(
        self, phone_number: str, time_slot_id: uuid.UUID, on_date: date
    ) -> ViewingAppointment:
        user = await self._user_by_phone(phone_number)
        await self._slot(time_slot_id)

        holder = await self.repo.find_for_slot(time_slot_id, on_date)
        if holder is not None:
            if holder.user_id == user.id:
                raise DuplicateBooking("You already booked this slot")
            raise SlotUnavailable("Slot already booked")

        try:
            booked = await self.repo.create_if_slot_free(user.id, time_slot_id, on_date)
        except ConstraintViolation:
            booked = None
        if booked is None:
            logger.info(f"Slot {time_slot_id} on {on_date} taken before {user.phone_number} could book")
            raise SlotUnavailable("Slot already booked")

        logger.info(f"Booked slot {time_slot_id} on {on_date} for {user.phone_number}")
        return booked

    async def cancel_appointment(self, phone_number: str, appointment_id: uuid.UUID) -> bool:
        user = await self._user_by_phone(phone_number)
        appointment = await self.repo.get_with_details(appointment_id)
        if appointment is None:
            raise NotFound(f"Appointment {appointment_id} not found")
        if appointment.user.id != user.id:
            raise Unauthorized("Appointment belongs to another user")
        removed = await self.repo.delete_by_id(appointment_id)
        logger.info(
            f"Cancelled appointment {appointment_id} on {appointment.appointment_date} "
            f"for {appointment.user.phone_number}"
        )
        return removed

    async def reschedule_appointment(
        self,
        appointment_id: uuid.UUID,
        new_time_slot_id: uuid.UUID,
        new_date: date,
        user_id: uuid.UUID,
    ) -> ViewingAppointment:
        appointment = await self.repo.find_by_id(appointment_id)
        if appointment is None:
            raise NotFound(f"Appointment {appointment_id} not found")
        if appointment.user_id != user_id:
            raise Unauthorized("Appointment belongs to another user")
        await self._slot(new_time_slot_id)

        try:
            updated = await self.repo.reschedule_if_slot_free(
                appointment_id, new_time_slot_id, new_date
            )
        except ConstraintViolation:
            updated = None
        if updated is None:
            raise SlotUnavailable("Slot already booked")
        return updated

    async def get_user_appointments(self, phone_number: str) -> list[ViewingAppointment]:
        user = await self._user_by_phone(phone_number)
        return await self.repo.list_for_user(user.id)

    async def get_upcoming_appointments(
        self, user_id: Optional[uuid.UUID] = None, days: int = settings.UPCOMING_DAYS
    ) -> list[ViewingAppointment]:
        start, end = self.dates.upcoming_window(days)
        return await self.repo.list_between(start, end, user_id=user_id)

    async def get_past_appointments(
        self, user_id: Optional[uuid.UUID] = None, days: int = settings.PAST_DAYS
    ) -> list[ViewingAppointment]:
        start, end = self.dates.past_window(days)
        return await self.repo.list_between(start, end, user_id=user_id, include_end=False)

    async def get_appointments_by_date(self, on_date: date) -> list[ViewingAppointment]:
        return await self.repo.list_by_date(on_date)

    async def get_statistics(
        self, from_date: Optional[date] = None, to_date: Optional[date] = None
    ) -> AppointmentStats:
        dates = await self.repo.appointment_dates(
            from_date, to_date, access=AccessLevel.ELEVATED
        )
        today = self.dates.today()
        return AppointmentStats(
            total=len(dates),
            upcoming=sum(1 for d in dates if d > today),
            past=sum(1 for d in dates if d < today),
            today=sum(1 for d in dates if d == today),
        )
