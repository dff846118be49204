import logging
from typing import Any, Mapping

from core.errors import ConstraintViolation, InvalidRole, NotFound
from core.settings import settings
from core.store import AccessLevel, Store
from models.enums import RoleName
from models.models import User
from models.utils import clean_phone_number
from repos.reference_repo import RoleRepo
from repos.user_repo import UserRepo
from schemas.schema import UserStats

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, store: Store):
        self.repo: UserRepo = UserRepo(store)
        self.role_repo: RoleRepo = RoleRepo(store)

    async def get_or_create_user(
        self, phone_number: str, display_name: str | None = None
    ) -> User:
        phone = clean_phone_number(phone_number)
        existing = await self.repo.find_by_phone_number(phone)
        if existing is not None:
            return existing

        role = await self.role_repo.find_by_name(settings.DEFAULT_USER_ROLE)
        if role is None:
            role, _ = await self.role_repo.get_or_create_role(settings.DEFAULT_USER_ROLE)

        try:
            user = await self.repo.create(
                {"phone_number": phone, "name": display_name, "role_id": role.id}
            )
            logger.info(f"Created user {phone} with role {role.role}")
        except ConstraintViolation:
            user = await self.repo.find_by_phone_number(phone)
            if user is None:
                raise
        return user

    async def get_user(self, phone_number: str) -> User:
        user = await self.repo.find_by_phone_number(clean_phone_number(phone_number))
        if user is None:
            raise NotFound(f"User {phone_number} not found")
        return user

    async def update_user_profile(self, phone_number: str, updates: Mapping[str, Any]) -> User:
        user = await self.get_user(phone_number)
        fields = {"name": updates["name"]} if "name" in updates else {}
        if fields:
            user = await self.repo.update_by_id(user.id, fields)
        if updates.get("role"):
            user = await self.update_role(user.phone_number, updates["role"])
        return user

    async def update_role(self, phone_number: str, role_name: str) -> User:
        try:
            role_name = RoleName(str(getattr(role_name, "value", role_name)).lower()).value
        except ValueError:
            raise InvalidRole(f"Unknown role: {role_name}")

        user = await self.get_user(phone_number)
        role = await self.role_repo.find_by_name(role_name)
        if role is None:
            raise InvalidRole(f"Role {role_name} is not seeded")
        updated = await self.repo.update_by_id(
            user.id, {"role_id": role.id, "onboarded": True}
        )
        logger.info(f"User {user.phone_number} is now {role_name}")
        return updated

    async def get_user_statistics(self) -> UserStats:
        total = await self.repo.count(access=AccessLevel.ELEVATED)
        by_role = await self.repo.role_counts(access=AccessLevel.ELEVATED)
        return UserStats(
            total=total,
            renters=by_role.get(RoleName.RENTER.value, 0),
            agents=by_role.get(RoleName.AGENT.value, 0),
            owners=by_role.get(RoleName.OWNER.value, 0),
        )
