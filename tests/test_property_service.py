import uuid
from decimal import Decimal

import pytest

from core.errors import InvalidPreferences, InvalidRole, NotFound, Unauthorized
from models.enums import PropertyStatus
from schemas.schema import PropertySearchCriteria, SearchOptions
from services.location_service import LocationService
from services.preference_service import PreferenceService
from services.property_service import PropertyService
from services.user_service import UserService


@pytest.fixture
def service(seeded_store):
    return PropertyService(seeded_store)


class TestSearch:
    async def test_empty_store_returns_empty_list(self, service):
        assert await service.search_properties({"min_price": 1000, "max_price": 2000}) == []

    async def test_price_range_and_status(self, service, renter, make_property):
        await make_property(renter, 900)
        inside = await make_property(renter, 1000)
        await make_property(renter, 1500, status=PropertyStatus.RENTED)
        top = await make_property(renter, 2000)
        await make_property(renter, 2001)

        found = await service.search_properties(
            {"min_price": 1000, "max_price": 2000, "status": "active"}
        )

        assert [p.id for p in found] == [inside.id, top.id]

    async def test_default_order_is_creation_order_and_limit_applies(self, service, renter, make_property):
        created = [await make_property(renter, price) for price in (300, 100, 200)]

        found = await service.search_properties(PropertySearchCriteria(), SearchOptions(limit=2))

        assert [p.id for p in found] == [p.id for p in created[:2]]

    async def test_custom_order(self, service, renter, make_property):
        for price in (300, 100, 200):
            await make_property(renter, price)

        found = await service.search_properties(
            {}, {"order_by": "price", "ascending": False}
        )

        assert [p.price for p in found] == [Decimal("300"), Decimal("200"), Decimal("100")]

    async def test_bedrooms_district_and_features(self, service, renter, make_property, seeded_store):
        location = await LocationService(seeded_store).get_or_create_location("Portugal", district="Alfama")
        match = await make_property(
            renter, 1200, bedrooms=2, district_id=location.district_id, furnished=True
        )
        await make_property(renter, 1200, bedrooms=1, district_id=location.district_id, furnished=True)
        await make_property(renter, 1200, bedrooms=2, furnished=True)

        found = await service.search_properties(
            {"min_bedrooms": 2, "district_id": location.district_id, "furnished": True}
        )

        assert [p.id for p in found] == [match.id]


class TestPropertiesForUser:
    async def test_no_preferences_means_no_listings(self, service, renter, make_property):
        await make_property(renter, 1000)

        assert await service.get_properties_for_user(renter.id) == []

    async def test_preferences_drive_the_search(self, service, renter, make_property, seeded_store):
        await PreferenceService(seeded_store).set_user_preferences(
            renter.phone_number, {"budget_min": 1000, "budget_max": 1500, "bedrooms_min": 2}
        )
        good = await make_property(renter, 1200, bedrooms=2)
        await make_property(renter, 1200, bedrooms=1)
        await make_property(renter, 1800, bedrooms=3)
        await make_property(renter, 1300, bedrooms=2, status=PropertyStatus.SOLD)

        found = await service.get_properties_for_user(renter.id)

        assert [p.id for p in found] == [good.id]


class TestManagement:
    async def test_create_computes_price_per_sqm(self, service, renter):
        created = await service.create_property(
            {"owner_id": renter.id, "address": "1 Rua Augusta", "price": 1500, "area": 50}
        )

        assert created.status == PropertyStatus.ACTIVE
        assert created.price_per_sqm == Decimal("30.00")

    async def test_create_rejects_negative_price(self, service, renter):
        with pytest.raises(ValueError):
            await service.create_property({"owner_id": renter.id, "address": "Nowhere 1", "price": -1})

    async def test_status_and_agent_lifecycle(self, service, renter, other_renter, make_property, seeded_store):
        users = UserService(seeded_store)
        await users.update_role(renter.phone_number, "owner")
        prop = await make_property(renter, 1000)

        with pytest.raises(InvalidRole):
            await service.assign_agent(prop.id, other_renter.id, renter.id)

        await users.update_role(other_renter.phone_number, "agent")
        assigned = await service.assign_agent(prop.id, other_renter.id, renter.id)
        assert assigned.agent_id == other_renter.id

        detailed = await service.get_property(prop.id)
        assert detailed.agent.id == other_renter.id
        assert detailed.owner.id == renter.id

        # the assigned agent may change the status but not the assignment
        assert (await service.update_status(prop.id, "pending", other_renter.id)).status == PropertyStatus.PENDING
        with pytest.raises(Unauthorized):
            await service.remove_agent(prop.id, other_renter.id)

        assert (await service.remove_agent(prop.id, renter.id)).agent_id is None
        assert (await service.update_status(prop.id, "sold", renter.id)).status == PropertyStatus.SOLD

    async def test_missing_property(self, service, renter, seeded_store):
        await UserService(seeded_store).update_role(renter.phone_number, "owner")

        with pytest.raises(NotFound):
            await service.update_status(uuid.uuid4(), PropertyStatus.INACTIVE, renter.id)
        with pytest.raises(NotFound):
            await service.delete_property(uuid.uuid4(), renter.id)

    async def test_renters_cannot_manage_listings(self, service, renter, make_property):
        prop = await make_property(renter, 1000)

        with pytest.raises(Unauthorized):
            await service.get_user_properties(renter.id)
        with pytest.raises(Unauthorized):
            await service.update_status(prop.id, "sold", renter.id)

    async def test_other_owner_cannot_touch_listing(self, service, renter, other_renter, make_property, seeded_store):
        users = UserService(seeded_store)
        await users.update_role(renter.phone_number, "owner")
        await users.update_role(other_renter.phone_number, "owner")
        prop = await make_property(renter, 1000)

        with pytest.raises(Unauthorized):
            await service.update_status(prop.id, "inactive", other_renter.id)
        with pytest.raises(Unauthorized):
            await service.delete_property(prop.id, other_renter.id)

        assert (await service.get_property(prop.id)).status == PropertyStatus.ACTIVE

    async def test_user_properties_cover_owned_and_managed(self, service, renter, other_renter, make_property, seeded_store):
        users = UserService(seeded_store)
        await users.update_role(renter.phone_number, "owner")
        await users.update_role(other_renter.phone_number, "agent")
        owned = await make_property(renter, 1000)
        managed = await make_property(renter, 2000, agent_id=other_renter.id)

        assert {p.id for p in await service.get_user_properties(renter.id)} == {owned.id, managed.id}
        assert [p.id for p in await service.get_user_properties(other_renter.id)] == [managed.id]

    async def test_owner_deletes_listing(self, service, renter, make_property, seeded_store):
        await UserService(seeded_store).update_role(renter.phone_number, "owner")
        prop = await make_property(renter, 1000)

        assert await service.delete_property(prop.id, renter.id) is True
        assert await service.repo.find_by_id(prop.id) is None
        assert await service.get_user_properties(renter.id) == []

    async def test_statistics(self, service, renter, make_property):
        await make_property(renter, 1)
        await make_property(renter, 2)
        await make_property(renter, 3, status=PropertyStatus.PENDING)

        stats = await service.get_statistics()

        assert stats.total == 3
        assert stats.active == 2
        assert stats.pending == 1
        assert stats.sold == 0


class TestPreferences:
    async def test_min_above_max_is_rejected(self, renter, seeded_store):
        with pytest.raises(InvalidPreferences) as exc_info:
            await PreferenceService(seeded_store).set_user_preferences(
                renter.phone_number, {"budget_min": 3000, "budget_max": 1000}
            )

        assert "budget_min must not exceed budget_max" in exc_info.value.errors

    async def test_partial_update_is_checked_against_stored_values(self, renter, seeded_store):
        service = PreferenceService(seeded_store)
        await service.set_user_preferences(renter.phone_number, {"bedrooms_max": 2})

        with pytest.raises(InvalidPreferences):
            await service.set_user_preferences(renter.phone_number, {"bedrooms_min": 3})

    async def test_upsert_keeps_one_row(self, renter, seeded_store):
        service = PreferenceService(seeded_store)
        first = await service.set_user_preferences(renter.phone_number, {"preferred_location": "Alfama"})
        second = await service.set_user_preferences(renter.phone_number, {"budget_max": 2000})

        assert first.id == second.id
        stored = await service.get_user_preferences(renter.phone_number)
        assert stored.preferred_location == "Alfama"
        assert stored.budget_max == Decimal("2000")

    async def test_negative_urgency(self, renter, seeded_store):
        with pytest.raises(InvalidPreferences):
            await PreferenceService(seeded_store).set_user_preferences(
                renter.phone_number, {"urgency_in_weeks": -1}
            )
