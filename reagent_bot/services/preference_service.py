import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from core.errors import InvalidPreferences
from core.store import Store
from models.models import UserPreference
from repos.preference_repo import PreferenceRepo
from schemas.schema import PreferenceFields

from .user_service import UserService

logger = logging.getLogger(__name__)

RANGES = (
    ("budget_min", "budget_max"),
    ("bedrooms_min", "bedrooms_max"),
    ("bathrooms_min", "bathrooms_max"),
    ("area_min", "area_max"),
)


def validate_preferences(fields: Mapping[str, Any]) -> PreferenceFields:
    try:
        prefs = PreferenceFields(**fields)
    except ValidationError as e:
        raise InvalidPreferences(
            [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        )

    errors = []
    for low_key, high_key in RANGES:
        low, high = getattr(prefs, low_key), getattr(prefs, high_key)
        if low is not None and high is not None and low > high:
            errors.append(f"{low_key} must not exceed {high_key}")
    if prefs.urgency_in_weeks is not None and prefs.urgency_in_weeks < 0:
        errors.append("urgency_in_weeks must not be negative")
    if errors:
        raise InvalidPreferences(errors)
    return prefs


class PreferenceService:
    def __init__(self, store: Store):
        self.repo: PreferenceRepo = PreferenceRepo(store)
        self.users: UserService = UserService(store)

    async def set_user_preferences(
        self, phone_number: str, fields: Mapping[str, Any]
    ) -> UserPreference:
        updates = validate_preferences(fields).model_dump(exclude_unset=True)
        user = await self.users.get_user(phone_number)
        existing = await self.repo.get_by_user_id(user.id)
        if existing is not None:
            # ranges must still hold once merged with what is already stored
            merged = {
                key: getattr(existing, key)
                for key in PreferenceFields.model_fields
                if getattr(existing, key) is not None
            }
            merged.update(updates)
            validate_preferences(merged)
        stored = await self.repo.upsert_for_user(user.id, updates)
        logger.info(f"Saved preferences for {user.phone_number}")
        return stored

    async def get_user_preferences(self, phone_number: str) -> Optional[UserPreference]:
        user = await self.users.get_user(phone_number)
        return await self.repo.get_by_user_id(user.id)
