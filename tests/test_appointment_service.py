"""Viewing slots: availability, booking conflicts, ownership and date windows."""

import uuid
from datetime import timedelta

import pytest

from conftest import TODAY
from core.errors import DuplicateBooking, NotFound, SlotUnavailable, Unauthorized
from repos.appointment_repo import AppointmentRepo
from services.appointment_service import AppointmentService

TOMORROW = TODAY + timedelta(days=1)


@pytest.fixture
def service(seeded_store, dates):
    return AppointmentService(seeded_store, dates=dates)


class TestAvailability:
    async def test_all_slots_free_in_start_order(self, service, slots):
        free = await service.get_available_time_slots(TOMORROW)

        assert [slot.id for slot in free] == [slot.id for slot in slots]
        assert len(free) == 10

    async def test_booked_slot_is_excluded_only_on_that_date(self, service, renter, slot_at):
        nine = slot_at(9)
        await service.book_viewing_appointment(renter.phone_number, nine.id, TOMORROW)

        assert nine.id not in {s.id for s in await service.get_available_time_slots(TOMORROW)}
        assert nine.id in {s.id for s in await service.get_available_time_slots(TODAY)}


class TestBooking:
    async def test_second_user_gets_slot_unavailable(self, service, renter, other_renter, slot_at):
        slot = slot_at(10)
        booked = await service.book_viewing_appointment(renter.phone_number, slot.id, TOMORROW)

        assert booked.user_id == renter.id
        assert booked.time_slot.id == slot.id

        with pytest.raises(SlotUnavailable):
            await service.book_viewing_appointment(other_renter.phone_number, slot.id, TOMORROW)

    async def test_same_user_twice_is_duplicate(self, service, renter, slot_at):
        slot = slot_at(11)
        await service.book_viewing_appointment(renter.phone_number, slot.id, TOMORROW)

        with pytest.raises(DuplicateBooking):
            await service.book_viewing_appointment(renter.phone_number, slot.id, TOMORROW)

    async def test_race_past_the_fast_path_is_slot_unavailable(
        self, service, renter, other_renter, slot_at, seeded_store
    ):
        slot = slot_at(12)
        # another request inserts between the fast-path check and our insert
        await AppointmentRepo(seeded_store).create_if_slot_free(other_renter.id, slot.id, TOMORROW)

        assert await service.repo.create_if_slot_free(renter.id, slot.id, TOMORROW) is None
        with pytest.raises(SlotUnavailable):
            await service.book_viewing_appointment(renter.phone_number, slot.id, TOMORROW)

    async def test_unknown_user_or_slot(self, service, renter, slot_at):
        with pytest.raises(NotFound):
            await service.book_viewing_appointment("+19999999999", slot_at(9).id, TOMORROW)
        with pytest.raises(NotFound):
            await service.book_viewing_appointment(renter.phone_number, uuid.uuid4(), TOMORROW)


class TestCancelAndReschedule:
    async def test_only_owner_can_cancel(self, service, renter, other_renter, slot_at):
        booked = await service.book_viewing_appointment(renter.phone_number, slot_at(13).id, TOMORROW)

        with pytest.raises(Unauthorized):
            await service.cancel_appointment(other_renter.phone_number, booked.id)

        assert await service.cancel_appointment(renter.phone_number, booked.id) is True
        assert await service.repo.find_by_id(booked.id) is None

    async def test_details_load_the_booking_user(self, service, renter, slot_at):
        booked = await service.book_viewing_appointment(renter.phone_number, slot_at(12).id, TOMORROW)

        detailed = await service.repo.get_with_details(booked.id)

        assert detailed.user.phone_number == renter.phone_number
        assert detailed.time_slot.start_time == slot_at(12).start_time

    async def test_cancel_missing_appointment(self, service, renter):
        with pytest.raises(NotFound):
            await service.cancel_appointment(renter.phone_number, uuid.uuid4())

    async def test_reschedule_keeps_identity(self, service, renter, slot_at):
        booked = await service.book_viewing_appointment(renter.phone_number, slot_at(14).id, TOMORROW)
        later = TOMORROW + timedelta(days=2)

        moved = await service.reschedule_appointment(booked.id, slot_at(15).id, later, renter.id)

        assert moved.id == booked.id
        assert moved.appointment_date == later
        assert moved.time_slot.start_time == slot_at(15).start_time

    async def test_reschedule_onto_own_pair_is_not_a_conflict(self, service, renter, slot_at):
        booked = await service.book_viewing_appointment(renter.phone_number, slot_at(16).id, TOMORROW)

        same = await service.reschedule_appointment(booked.id, slot_at(16).id, TOMORROW, renter.id)

        assert same.id == booked.id

    async def test_reschedule_conflicts_and_ownership(self, service, renter, other_renter, slot_at):
        mine = await service.book_viewing_appointment(renter.phone_number, slot_at(9).id, TOMORROW)
        await service.book_viewing_appointment(other_renter.phone_number, slot_at(10).id, TOMORROW)

        with pytest.raises(SlotUnavailable):
            await service.reschedule_appointment(mine.id, slot_at(10).id, TOMORROW, renter.id)
        with pytest.raises(Unauthorized):
            await service.reschedule_appointment(mine.id, slot_at(11).id, TOMORROW, other_renter.id)


class TestWindows:
    @pytest.fixture
    async def spread(self, service, renter, slot_at):
        offsets = (-31, -30, -1, 0, 7, 8)
        for offset in offsets:
            await service.repo.create_if_slot_free(
                renter.id, slot_at(9).id, TODAY + timedelta(days=offset)
            )
        return offsets

    async def test_upcoming_includes_today_through_seven_days(self, service, renter, spread):
        upcoming = await service.get_upcoming_appointments(user_id=renter.id)

        assert [a.appointment_date for a in upcoming] == [TODAY, TODAY + timedelta(days=7)]

    async def test_past_excludes_today(self, service, renter, spread):
        past = await service.get_past_appointments(user_id=renter.id)

        assert [a.appointment_date for a in past] == [
            TODAY - timedelta(days=30),
            TODAY - timedelta(days=1),
        ]

    async def test_by_date_and_user_listing(self, service, renter, spread):
        assert len(await service.get_appointments_by_date(TODAY)) == 1
        everything = await service.get_user_appointments(renter.phone_number)
        assert len(everything) == len(spread)
        dates = [a.appointment_date for a in everything]
        assert dates == sorted(dates)

    async def test_statistics(self, service, spread):
        stats = await service.get_statistics()

        assert stats.total == 6
        assert stats.today == 1
        assert stats.upcoming == 2
        assert stats.past == 3
