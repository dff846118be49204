import uuid
from dataclasses import dataclass
from typing import Any, Generic, Mapping, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ConstraintViolation
from core.get_db import Base
from core.store import AccessLevel, Store

ModelT = TypeVar("ModelT", bound=Base)

RESTRICTED = AccessLevel.RESTRICTED


@dataclass(frozen=True)
class OrderBy:
    column: str
    ascending: bool = True


class BaseRepo(Generic[ModelT]):
    """
    Generic CRUD over one table.

    Filters are exact-match conjunctions; a filter whose value is ``None`` is
    skipped. Every method takes the access level it must run under.
    """

    model: Type[ModelT]

    def __init__(self, store: Store, model: Optional[Type[ModelT]] = None):
        self.store = store
        if model is not None:
            self.model = model

    def _apply_filters(self, stmt, filters: Optional[Mapping[str, Any]]):
        for key, value in (filters or {}).items():
            if value is None:
                continue
            stmt = stmt.where(getattr(self.model, key) == value)
        return stmt

    def _apply_order(self, stmt, order_by: Optional[OrderBy]):
        if order_by is None:
            return stmt
        column = getattr(self.model, order_by.column)
        return stmt.order_by(column.asc() if order_by.ascending else column.desc())

    async def find_by_id(self, record_id: uuid.UUID, access: AccessLevel = RESTRICTED) -> Optional[ModelT]:
        async def work(db: AsyncSession):
            return await db.get(self.model, record_id)

        return await self.store.run(work, access=access)

    async def find_one(self, filters: Mapping[str, Any], access: AccessLevel = RESTRICTED) -> Optional[ModelT]:
        async def work(db: AsyncSession):
            stmt = self._apply_filters(select(self.model), filters).limit(1)
            result = await db.execute(stmt)
            return result.scalars().first()

        return await self.store.run(work, access=access)

    async def find_all(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[OrderBy] = None,
        access: AccessLevel = RESTRICTED,
    ) -> Sequence[ModelT]:
        async def work(db: AsyncSession):
            stmt = self._apply_filters(select(self.model), filters)
            stmt = self._apply_order(stmt, order_by)
            if offset:
                stmt = stmt.offset(offset)
            if limit:
                stmt = stmt.limit(limit)
            result = await db.execute(stmt)
            return list(result.scalars().all())

        return await self.store.run(work, access=access)

    async def create(self, fields: Mapping[str, Any], access: AccessLevel = RESTRICTED) -> ModelT:
        async def work(db: AsyncSession):
            record = self.model(**fields)
            db.add(record)
            await db.flush()
            await db.refresh(record)
            return record

        return await self.store.run(work, access=access)

    async def update_by_id(
        self,
        record_id: uuid.UUID,
        fields: Mapping[str, Any],
        access: AccessLevel = RESTRICTED,
    ) -> Optional[ModelT]:
        async def work(db: AsyncSession):
            record = await db.get(self.model, record_id)
            if record is None:
                return None
            for key, value in fields.items():
                setattr(record, key, value)
            await db.flush()
            await db.refresh(record)
            return record

        return await self.store.run(work, access=access)

    async def delete_by_id(self, record_id: uuid.UUID, access: AccessLevel = RESTRICTED) -> bool:
        async def work(db: AsyncSession):
            result = await db.execute(delete(self.model).where(self.model.id == record_id))
            return result.rowcount > 0

        return await self.store.run(work, access=access)

    async def count(self, filters: Optional[Mapping[str, Any]] = None, access: AccessLevel = RESTRICTED) -> int:
        async def work(db: AsyncSession):
            stmt = self._apply_filters(
                select(func.count()).select_from(self.model), filters
            )
            result = await db.execute(stmt)
            return int(result.scalar_one())

        return await self.store.run(work, access=access)

    async def exists(self, filters: Optional[Mapping[str, Any]] = None, access: AccessLevel = RESTRICTED) -> bool:
        return await self.count(filters, access=access) > 0

    async def get_or_create(
        self,
        filters: Mapping[str, Any],
        defaults: Optional[Mapping[str, Any]] = None,
        access: AccessLevel = RESTRICTED,
    ) -> tuple[ModelT, bool]:
        existing = await self.find_one(filters, access=access)
        if existing is not None:
            return existing, False

        try:
            created = await self.create({**filters, **(defaults or {})}, access=access)
            return created, True
        except ConstraintViolation:
            # Lost a concurrent insert; the winner's row is the answer.
            existing = await self.find_one(filters, access=access)
            if existing is None:
                raise
            return existing, False
