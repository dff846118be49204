import uuid

from core.store import AccessLevel
from models.models import City, Country, District

from .base_repo import RESTRICTED, BaseRepo


class CountryRepo(BaseRepo[Country]):
    model = Country

    async def get_or_create_country(
        self, name: str, access: AccessLevel = RESTRICTED
    ) -> tuple[Country, bool]:
        return await self.get_or_create({"country": name}, access=access)


class CityRepo(BaseRepo[City]):
    model = City

    async def get_or_create_city(
        self, name: str, country_id: uuid.UUID, access: AccessLevel = RESTRICTED
    ) -> tuple[City, bool]:
        return await self.get_or_create(
            {"city": name, "country_id": country_id}, access=access
        )


class DistrictRepo(BaseRepo[District]):
    model = District

    async def get_or_create_district(
        self, name: str, country_id: uuid.UUID, access: AccessLevel = RESTRICTED
    ) -> tuple[District, bool]:
        return await self.get_or_create(
            {"district": name, "country_id": country_id}, access=access
        )

    async def list_for_country(
        self, country_id: uuid.UUID, access: AccessLevel = RESTRICTED
    ) -> list[District]:
        return await self.find_all({"country_id": country_id}, access=access)
