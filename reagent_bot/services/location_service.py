from dataclasses import dataclass
from typing import Optional
import uuid

from core.store import AccessLevel, Store
from models.utils import normalize_location_name
from repos.location_repo import CityRepo, CountryRepo, DistrictRepo


@dataclass
class LocationIds:
    country_id: uuid.UUID
    city_id: Optional[uuid.UUID] = None
    district_id: Optional[uuid.UUID] = None


class LocationService:
    def __init__(self, store: Store):
        self.countries = CountryRepo(store)
        self.cities = CityRepo(store)
        self.districts = DistrictRepo(store)

    async def get_or_create_location(
        self,
        country: str,
        city: str | None = None,
        district: str | None = None,
        access: AccessLevel = AccessLevel.ELEVATED,
    ) -> LocationIds:
        country_name = normalize_location_name(country)
        if not country_name:
            raise ValueError("Country name is required")

        country_row, _ = await self.countries.get_or_create_country(country_name, access=access)
        ids = LocationIds(country_id=country_row.id)

        if city and normalize_location_name(city):
            city_row, _ = await self.cities.get_or_create_city(
                normalize_location_name(city), country_row.id, access=access
            )
            ids.city_id = city_row.id

        if district and normalize_location_name(district):
            district_row, _ = await self.districts.get_or_create_district(
                normalize_location_name(district), country_row.id, access=access
            )
            ids.district_id = district_row.id

        return ids
