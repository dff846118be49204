import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.store import AccessLevel
from models.models import User, UserRole

from .base_repo import RESTRICTED, BaseRepo


class UserRepo(BaseRepo[User]):
    model = User

    async def find_by_phone_number(
        self, phone_number: str, access: AccessLevel = RESTRICTED
    ) -> Optional[User]:
        return await self.find_one({"phone_number": phone_number}, access=access)

    async def get_with_role(
        self, user_id: uuid.UUID, access: AccessLevel = RESTRICTED
    ) -> Optional[User]:
        # role is loaded eagerly (selectin), so a plain get is enough
        return await self.find_by_id(user_id, access=access)

    async def list_by_role(
        self, role_name: str, access: AccessLevel = RESTRICTED
    ) -> list[User]:
        async def work(db: AsyncSession):
            stmt = (
                select(User)
                .join(UserRole, User.role_id == UserRole.id)
                .where(UserRole.role == role_name)
                .order_by(User.created_at.asc())
            )
            result = await db.execute(stmt)
            return list(result.scalars().all())

        return await self.store.run(work, access=access)

    async def role_counts(self, access: AccessLevel = RESTRICTED) -> dict[str, int]:
        async def work(db: AsyncSession):
            stmt = (
                select(UserRole.role, func.count(User.id))
                .join(UserRole, User.role_id == UserRole.id)
                .group_by(UserRole.role)
            )
            result = await db.execute(stmt)
            return {role: int(total) for role, total in result.all()}

        return await self.store.run(work, access=access)
