from datetime import date, time
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.store import AccessLevel
from models.models import ViewingAppointment, ViewingTimeSlot

from .base_repo import RESTRICTED, BaseRepo, OrderBy


class TimeSlotRepo(BaseRepo[ViewingTimeSlot]):
    model = ViewingTimeSlot

    async def list_ordered(self, access: AccessLevel = RESTRICTED) -> list[ViewingTimeSlot]:
        return await self.find_all(order_by=OrderBy("start_time"), access=access)

    async def find_by_time_range(
        self, start_time: time, end_time: time, access: AccessLevel = RESTRICTED
    ) -> Optional[ViewingTimeSlot]:
        return await self.find_one(
            {"start_time": start_time, "end_time": end_time}, access=access
        )

    async def get_or_create_slot(
        self, start_time: time, end_time: time, access: AccessLevel = AccessLevel.ELEVATED
    ) -> tuple[ViewingTimeSlot, bool]:
        return await self.get_or_create(
            {"start_time": start_time, "end_time": end_time}, access=access
        )

    async def booked_slot_ids(
        self, on_date: date, access: AccessLevel = RESTRICTED
    ) -> set:
        async def work(db: AsyncSession):
            result = await db.execute(
                select(ViewingAppointment.viewing_time_slot_id).where(
                    ViewingAppointment.appointment_date == on_date
                )
            )
            return set(result.scalars().all())

        return await self.store.run(work, access=access)
