import logging
from datetime import time

from core.store import AccessLevel, Store
from models.enums import DEFAULT_APARTMENT_TYPES, DEFAULT_TIME_SLOTS, RoleName
from repos.reference_repo import ApartmentTypeRepo, RoleRepo
from repos.time_slot_repo import TimeSlotRepo

logger = logging.getLogger(__name__)

ELEVATED = AccessLevel.ELEVATED


class ReferenceDataService:
    """Seeds roles, viewing time slots and apartment types."""

    def __init__(self, store: Store):
        self.roles = RoleRepo(store)
        self.slots = TimeSlotRepo(store)
        self.apartment_types = ApartmentTypeRepo(store)

    async def initialize_reference_data(self) -> dict[str, int]:
        created = {"roles": 0, "time_slots": 0, "apartment_types": 0}

        for role in RoleName:
            try:
                _, was_created = await self.roles.get_or_create_role(role.value, access=ELEVATED)
                created["roles"] += int(was_created)
            except Exception:
                logger.exception(f"Failed to seed role {role.value}")

        for start, end in DEFAULT_TIME_SLOTS:
            try:
                _, was_created = await self.slots.get_or_create_slot(
                    time.fromisoformat(start), time.fromisoformat(end), access=ELEVATED
                )
                created["time_slots"] += int(was_created)
            except Exception:
                logger.exception(f"Failed to seed time slot {start}-{end}")

        for type_name in DEFAULT_APARTMENT_TYPES:
            try:
                _, was_created = await self.apartment_types.get_or_create_type(
                    type_name, access=ELEVATED
                )
                created["apartment_types"] += int(was_created)
            except Exception:
                logger.exception(f"Failed to seed apartment type {type_name}")

        logger.info(f"Reference data ready: {created}")
        return created
