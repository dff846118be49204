import uuid
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

import models.event_listener  # noqa: F401
from core.store import AccessLevel
from models.models import Property
from schemas.schema import PropertySearchCriteria, SearchOptions

from .base_repo import RESTRICTED, BaseRepo

RANGE_FILTERS = (
    ("min_price", Property.price, ">="),
    ("max_price", Property.price, "<="),
    ("min_bedrooms", Property.bedrooms, ">="),
    ("max_bedrooms", Property.bedrooms, "<="),
    ("min_bathrooms", Property.bathrooms, ">="),
    ("max_bathrooms", Property.bathrooms, "<="),
    ("min_area", Property.area, ">="),
    ("max_area", Property.area, "<="),
)

EXACT_FILTERS = (
    ("status", Property.status),
    ("district_id", Property.district_id),
    ("apartment_type_id", Property.type_id),
    ("owner_id", Property.owner_id),
    ("agent_id", Property.agent_id),
    ("furnished", Property.furnished),
    ("elevator", Property.elevator),
    ("air_conditioning", Property.air_conditioning),
    ("work_room", Property.work_room),
)


class PropertyRepo(BaseRepo[Property]):
    model = Property

    def _search_statement(self, criteria: PropertySearchCriteria):
        stmt = select(Property)
        for key, column, op in RANGE_FILTERS:
            value = getattr(criteria, key)
            if value is None:
                continue
            stmt = stmt.where(column >= value if op == ">=" else column <= value)
        for key, column in EXACT_FILTERS:
            value = getattr(criteria, key)
            if value is not None:
                stmt = stmt.where(column == value)
        if criteria.available_from is not None:
            stmt = stmt.where(
                (Property.available_from.is_(None))
                | (Property.available_from <= criteria.available_from)
            )
        return stmt

    async def search(
        self,
        criteria: PropertySearchCriteria,
        options: Optional[SearchOptions] = None,
        access: AccessLevel = RESTRICTED,
    ) -> list[Property]:
        options = options or SearchOptions()

        async def work(db: AsyncSession):
            stmt = self._search_statement(criteria)
            column = getattr(Property, options.order_by, Property.created_at)
            primary = column.asc() if options.ascending else column.desc()
            stmt = stmt.order_by(primary, Property.id.asc())
            if options.offset:
                stmt = stmt.offset(options.offset)
            if options.limit:
                stmt = stmt.limit(options.limit)
            result = await db.execute(stmt)
            return list(result.scalars().all())

        return await self.store.run(work, access=access)

    async def get_with_details(
        self, property_id: uuid.UUID, access: AccessLevel = RESTRICTED
    ) -> Optional[Property]:
        async def work(db: AsyncSession):
            result = await db.execute(
                select(Property)
                .options(selectinload(Property.owner), selectinload(Property.agent))
                .where(Property.id == property_id)
            )
            return result.scalars().first()

        return await self.store.run(work, access=access)

    async def list_for_user(
        self, user_id: uuid.UUID, access: AccessLevel = RESTRICTED
    ) -> list[Property]:
        """Properties the user owns or is the assigned agent for."""

        async def work(db: AsyncSession):
            result = await db.execute(
                select(Property)
                .where(or_(Property.owner_id == user_id, Property.agent_id == user_id))
                .order_by(Property.created_at.asc(), Property.id.asc())
            )
            return list(result.scalars().all())

        return await self.store.run(work, access=access)

    async def status_counts(self, access: AccessLevel = RESTRICTED) -> dict[str, int]:
        async def work(db: AsyncSession):
            result = await db.execute(
                select(Property.status, func.count(Property.id)).group_by(Property.status)
            )
            return {
                getattr(status, "value", status): int(total)
                for status, total in result.all()
            }

        return await self.store.run(work, access=access)
