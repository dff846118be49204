import asyncio

import pytest

from core.errors import InvalidRole, NotFound
from services.location_service import LocationService
from services.reference_data_service import ReferenceDataService
from services.user_service import UserService


class TestGetOrCreateUser:
    async def test_new_number_gets_default_role(self, seeded_store):
        user = await UserService(seeded_store).get_or_create_user("whatsapp:+15551234567", "Ana")

        assert user.phone_number == "+15551234567"
        assert user.name == "Ana"
        assert user.role_name == "renter"
        assert user.onboarded is False

    async def test_repeated_calls_return_same_identity(self, seeded_store):
        service = UserService(seeded_store)

        first = await service.get_or_create_user("+15551234567", "Ana")
        second = await service.get_or_create_user("whatsapp:+15551234567", "Someone Else")

        assert first.id == second.id
        assert second.name == "Ana"

    async def test_concurrent_first_contact_resolves_to_one_user(self, seeded_store):
        service = UserService(seeded_store)

        users = await asyncio.gather(
            service.get_or_create_user("+15559990000"),
            service.get_or_create_user("+15559990000"),
        )

        assert users[0].id == users[1].id
        assert await service.repo.count({"phone_number": "+15559990000"}) == 1


class TestProfileUpdates:
    async def test_update_name_and_role(self, renter, seeded_store):
        service = UserService(seeded_store)

        updated = await service.update_user_profile(
            renter.phone_number, {"name": "Rita R.", "role": "agent"}
        )

        assert updated.name == "Rita R."
        assert updated.role_name == "agent"
        assert updated.onboarded is True

    async def test_unknown_role_rejected(self, renter, seeded_store):
        with pytest.raises(InvalidRole):
            await UserService(seeded_store).update_role(renter.phone_number, "landlord")

    async def test_unknown_user(self, seeded_store):
        with pytest.raises(NotFound):
            await UserService(seeded_store).update_user_profile("+10000000000", {"name": "x"})

    async def test_statistics_count_by_role(self, renter, other_renter, seeded_store):
        service = UserService(seeded_store)
        await service.update_role(other_renter.phone_number, "owner")

        stats = await service.get_user_statistics()

        assert stats.total == 2
        assert stats.renters == 1
        assert stats.owners == 1
        assert stats.agents == 0

    async def test_list_by_role_in_signup_order(self, renter, other_renter, seeded_store):
        service = UserService(seeded_store)
        await service.update_role(other_renter.phone_number, "agent")

        agents = await service.repo.list_by_role("agent")
        renters = await service.repo.list_by_role("renter")

        assert [u.id for u in agents] == [other_renter.id]
        assert [u.id for u in renters] == [renter.id]
        assert (await service.repo.get_with_role(other_renter.id)).role_name == "agent"


class TestReferenceData:
    async def test_seeding_twice_creates_nothing_new(self, store):
        service = ReferenceDataService(store)

        first = await service.initialize_reference_data()
        second = await service.initialize_reference_data()

        assert first == {"roles": 3, "time_slots": 10, "apartment_types": 6}
        assert second == {"roles": 0, "time_slots": 0, "apartment_types": 0}


class TestLocations:
    async def test_names_are_normalized_and_reused(self, store):
        service = LocationService(store)

        first = await service.get_or_create_location("  portugal ", "lisbon", "alfama")
        second = await service.get_or_create_location("Portugal", "Lisbon", "Alfama")

        assert first == second
        district = await service.districts.find_by_id(first.district_id)
        assert district.district == "Alfama"

    async def test_country_required(self, store):
        with pytest.raises(ValueError):
            await LocationService(store).get_or_create_location("   ")
