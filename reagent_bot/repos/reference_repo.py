from typing import Optional

from core.store import AccessLevel
from models.models import ApartmentType, UserRole

from .base_repo import RESTRICTED, BaseRepo


class RoleRepo(BaseRepo[UserRole]):
    model = UserRole

    async def find_by_name(
        self, role_name: str, access: AccessLevel = RESTRICTED
    ) -> Optional[UserRole]:
        return await self.find_one({"role": role_name}, access=access)

    async def get_or_create_role(
        self, role_name: str, access: AccessLevel = AccessLevel.ELEVATED
    ) -> tuple[UserRole, bool]:
        return await self.get_or_create({"role": role_name}, access=access)


class ApartmentTypeRepo(BaseRepo[ApartmentType]):
    model = ApartmentType

    async def find_by_name(
        self, type_name: str, access: AccessLevel = RESTRICTED
    ) -> Optional[ApartmentType]:
        return await self.find_one({"type": type_name}, access=access)

    async def get_or_create_type(
        self, type_name: str, access: AccessLevel = AccessLevel.ELEVATED
    ) -> tuple[ApartmentType, bool]:
        return await self.get_or_create({"type": type_name}, access=access)
