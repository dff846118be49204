import uuid
from typing import Any, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.store import AccessLevel
from models.models import UserPreference

from .base_repo import RESTRICTED, BaseRepo


class PreferenceRepo(BaseRepo[UserPreference]):
    model = UserPreference

    async def get_by_user_id(
        self, user_id: uuid.UUID, access: AccessLevel = RESTRICTED
    ) -> Optional[UserPreference]:
        return await self.find_one({"user_id": user_id}, access=access)

    async def upsert_for_user(
        self,
        user_id: uuid.UUID,
        fields: Mapping[str, Any],
        access: AccessLevel = RESTRICTED,
    ) -> UserPreference:
        async def work(db: AsyncSession):
            result = await db.execute(
                select(UserPreference).where(UserPreference.user_id == user_id)
            )
            record = result.scalar_one_or_none()
            if record is None:
                record = UserPreference(user_id=user_id, **fields)
                db.add(record)
            else:
                for key, value in fields.items():
                    setattr(record, key, value)
            await db.flush()
            await db.refresh(record)
            return record

        return await self.store.run(work, access=access)
