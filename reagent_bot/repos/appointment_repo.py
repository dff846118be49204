import uuid
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.store import AccessLevel
from models.models import ViewingAppointment, ViewingTimeSlot

from .base_repo import RESTRICTED, BaseRepo


class AppointmentRepo(BaseRepo[ViewingAppointment]):
    model = ViewingAppointment

    def _ordered(self):
        return (
            select(ViewingAppointment)
            .join(ViewingTimeSlot, ViewingAppointment.viewing_time_slot_id == ViewingTimeSlot.id)
            .order_by(
                ViewingAppointment.appointment_date.asc(),
                ViewingTimeSlot.start_time.asc(),
            )
        )

    async def _fetch(self, stmt, access: AccessLevel) -> list[ViewingAppointment]:
        async def work(db: AsyncSession):
            result = await db.execute(stmt)
            return list(result.scalars().all())

        return await self.store.run(work, access=access)

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        access: AccessLevel = RESTRICTED,
    ) -> list[ViewingAppointment]:
        stmt = self._ordered().where(ViewingAppointment.user_id == user_id)
        if from_date is not None:
            stmt = stmt.where(ViewingAppointment.appointment_date >= from_date)
        if to_date is not None:
            stmt = stmt.where(ViewingAppointment.appointment_date <= to_date)
        return await self._fetch(stmt, access)

    async def list_between(
        self,
        start: date,
        end: date,
        user_id: Optional[uuid.UUID] = None,
        include_end: bool = True,
        access: AccessLevel = RESTRICTED,
    ) -> list[ViewingAppointment]:
        """Appointments dated from ``start`` up to ``end``; ``end`` is excluded
        when ``include_end`` is false."""
        stmt = self._ordered().where(ViewingAppointment.appointment_date >= start)
        if include_end:
            stmt = stmt.where(ViewingAppointment.appointment_date <= end)
        else:
            stmt = stmt.where(ViewingAppointment.appointment_date < end)
        if user_id is not None:
            stmt = stmt.where(ViewingAppointment.user_id == user_id)
        return await self._fetch(stmt, access)

    async def list_by_date(
        self, on_date: date, access: AccessLevel = RESTRICTED
    ) -> list[ViewingAppointment]:
        stmt = self._ordered().where(ViewingAppointment.appointment_date == on_date)
        return await self._fetch(stmt, access)

    async def get_with_details(
        self, appointment_id: uuid.UUID, access: AccessLevel = RESTRICTED
    ) -> Optional[ViewingAppointment]:
        async def work(db: AsyncSession):
            result = await db.execute(
                select(ViewingAppointment)
                .options(selectinload(ViewingAppointment.user))
                .where(ViewingAppointment.id == appointment_id)
            )
            return result.scalars().first()

        return await self.store.run(work, access=access)

    async def find_for_slot(
        self, time_slot_id: uuid.UUID, on_date: date, access: AccessLevel = RESTRICTED
    ) -> Optional[ViewingAppointment]:
        return await self.find_one(
            {"viewing_time_slot_id": time_slot_id, "appointment_date": on_date},
            access=access,
        )

    async def create_if_slot_free(
        self,
        user_id: uuid.UUID,
        time_slot_id: uuid.UUID,
        on_date: date,
        access: AccessLevel = RESTRICTED,
    ) -> Optional[ViewingAppointment]:
        """
        Re-check the (slot, date) pair and insert in the same session.

        Returns ``None`` when the pair is already taken. A concurrent insert
        that slips past the check surfaces as ``ConstraintViolation`` from the
        unique index.
        """

        async def work(db: AsyncSession):
            taken = await db.execute(
                select(ViewingAppointment.id).where(
                    ViewingAppointment.viewing_time_slot_id == time_slot_id,
                    ViewingAppointment.appointment_date == on_date,
                )
            )
            if taken.first() is not None:
                return None
            record = ViewingAppointment(
                user_id=user_id,
                viewing_time_slot_id=time_slot_id,
                appointment_date=on_date,
            )
            db.add(record)
            await db.flush()
            await db.refresh(record)
            return record

        return await self.store.run(work, access=access)

    async def reschedule_if_slot_free(
        self,
        appointment_id: uuid.UUID,
        time_slot_id: uuid.UUID,
        on_date: date,
        access: AccessLevel = RESTRICTED,
    ) -> Optional[ViewingAppointment]:
        async def work(db: AsyncSession):
            taken = await db.execute(
                select(ViewingAppointment.id).where(
                    ViewingAppointment.viewing_time_slot_id == time_slot_id,
                    ViewingAppointment.appointment_date == on_date,
                    ViewingAppointment.id != appointment_id,
                )
            )
            if taken.first() is not None:
                return None
            record = await db.get(ViewingAppointment, appointment_id)
            if record is None:
                return None
            record.viewing_time_slot_id = time_slot_id
            record.appointment_date = on_date
            await db.flush()
            await db.refresh(record)
            return record

        return await self.store.run(work, access=access)

    async def appointment_dates(
        self,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        access: AccessLevel = RESTRICTED,
    ) -> list[date]:
        async def work(db: AsyncSession):
            stmt = select(ViewingAppointment.appointment_date)
            if from_date is not None:
                stmt = stmt.where(ViewingAppointment.appointment_date >= from_date)
            if to_date is not None:
                stmt = stmt.where(ViewingAppointment.appointment_date <= to_date)
            result = await db.execute(stmt)
            return list(result.scalars().all())

        return await self.store.run(work, access=access)
