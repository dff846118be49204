import logging
import uuid
from typing import Any, Mapping, Optional

from core.errors import InvalidRole, NotFound, Unauthorized
from core.settings import settings
from core.store import AccessLevel, Store
from models.enums import PropertyStatus, RoleName
from models.models import Property, User
from models.utils import normalize_location_name
from repos.location_repo import DistrictRepo
from repos.preference_repo import PreferenceRepo
from repos.property_repo import PropertyRepo
from repos.user_repo import UserRepo
from schemas.schema import PropertyCreate, PropertySearchCriteria, PropertyStats, SearchOptions

logger = logging.getLogger(__name__)

MANAGER_ROLES = (RoleName.OWNER.value, RoleName.AGENT.value)


class PropertyService:
    def __init__(self, store: Store):
        self.repo: PropertyRepo = PropertyRepo(store)
        self.users: UserRepo = UserRepo(store)
        self.preferences: PreferenceRepo = PreferenceRepo(store)
        self.districts: DistrictRepo = DistrictRepo(store)

    async def search_properties(
        self,
        criteria: PropertySearchCriteria | Mapping[str, Any] | None = None,
        options: SearchOptions | Mapping[str, Any] | None = None,
    ) -> list[Property]:
        if not isinstance(criteria, PropertySearchCriteria):
            criteria = PropertySearchCriteria(**(criteria or {}))
        if not isinstance(options, SearchOptions):
            options = SearchOptions(**(options or {}))
        return await self.repo.search(criteria, options)

    async def criteria_for_user(self, user_id: uuid.UUID) -> Optional[PropertySearchCriteria]:
        prefs = await self.preferences.get_by_user_id(user_id)
        if prefs is None:
            return None

        district_id = None
        if prefs.preferred_location:
            district = await self.districts.find_one(
                {"district": normalize_location_name(prefs.preferred_location)}
            )
            district_id = district.id if district else None

        return PropertySearchCriteria(
            status=PropertyStatus.ACTIVE,
            min_price=prefs.budget_min,
            max_price=prefs.budget_max,
            min_bedrooms=prefs.bedrooms_min,
            max_bedrooms=prefs.bedrooms_max,
            min_bathrooms=prefs.bathrooms_min,
            max_bathrooms=prefs.bathrooms_max,
            min_area=prefs.area_min,
            max_area=prefs.area_max,
            district_id=district_id,
        )

    async def get_properties_for_user(
        self, user_id: uuid.UUID, limit: int | None = None
    ) -> list[Property]:
        criteria = await self.criteria_for_user(user_id)
        if criteria is None:
            return []
        return await self.repo.search(
            criteria, SearchOptions(limit=limit or settings.SEARCH_RESULT_LIMIT)
        )

    async def get_property(self, property_id: uuid.UUID) -> Property:
        record = await self.repo.get_with_details(property_id)
        if record is None:
            raise NotFound(f"Property {property_id} not found")
        return record

    async def _require_agent(self, agent_id: uuid.UUID) -> User:
        agent = await self.users.get_with_role(agent_id)
        if agent is None:
            raise NotFound(f"Agent {agent_id} not found")
        if agent.role_name != RoleName.AGENT.value:
            raise InvalidRole(f"User {agent_id} is not an agent")
        return agent

    async def _require_manager(self, user_id: uuid.UUID) -> User:
        user = await self.users.get_with_role(user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found")
        if user.role_name not in MANAGER_ROLES:
            raise Unauthorized("Only owners and agents can manage property listings")
        return user

    async def _managed_property(
        self, property_id: uuid.UUID, user_id: uuid.UUID, owner_only: bool = False
    ) -> Property:
        user = await self._require_manager(user_id)
        record = await self.repo.find_by_id(property_id)
        if record is None:
            raise NotFound(f"Property {property_id} not found")
        allowed = record.owner_id == user.id or (
            not owner_only and record.agent_id == user.id
        )
        if not allowed:
            raise Unauthorized(f"Property {property_id} is not managed by {user.phone_number}")
        return record

    async def get_user_properties(self, user_id: uuid.UUID) -> list[Property]:
        await self._require_manager(user_id)
        return await self.repo.list_for_user(user_id)

    async def create_property(self, data: PropertyCreate | Mapping[str, Any]) -> Property:
        if not isinstance(data, PropertyCreate):
            data = PropertyCreate(**data)

        owner = await self.users.find_by_id(data.owner_id)
        if owner is None:
            raise NotFound(f"Owner {data.owner_id} not found")
        if data.agent_id is not None:
            await self._require_agent(data.agent_id)

        record = await self.repo.create(data.model_dump())
        logger.info(f"Property {record.id} listed by {owner.phone_number}")
        return record

    async def update_status(
        self, property_id: uuid.UUID, status: PropertyStatus | str, user_id: uuid.UUID
    ) -> Property:
        status = PropertyStatus(status)
        await self._managed_property(property_id, user_id)
        record = await self.repo.update_by_id(property_id, {"status": status})
        if record is None:
            raise NotFound(f"Property {property_id} not found")
        logger.info(f"Property {property_id} status -> {status.value}")
        return record

    async def assign_agent(
        self, property_id: uuid.UUID, agent_id: uuid.UUID, user_id: uuid.UUID
    ) -> Property:
        await self._managed_property(property_id, user_id, owner_only=True)
        await self._require_agent(agent_id)
        record = await self.repo.update_by_id(property_id, {"agent_id": agent_id})
        if record is None:
            raise NotFound(f"Property {property_id} not found")
        return record

    async def remove_agent(self, property_id: uuid.UUID, user_id: uuid.UUID) -> Property:
        await self._managed_property(property_id, user_id, owner_only=True)
        record = await self.repo.update_by_id(property_id, {"agent_id": None})
        if record is None:
            raise NotFound(f"Property {property_id} not found")
        return record

    async def delete_property(self, property_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        await self._managed_property(property_id, user_id, owner_only=True)
        removed = await self.repo.delete_by_id(property_id)
        logger.info(f"Property {property_id} deleted by owner {user_id}")
        return removed

    async def get_statistics(self) -> PropertyStats:
        counts = await self.repo.status_counts(access=AccessLevel.ELEVATED)
        return PropertyStats(total=sum(counts.values()), **counts)
