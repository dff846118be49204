"""Data access contract: generic CRUD, filters and failure translation."""

import asyncio
import uuid

import pytest

from core.errors import ConstraintViolation, StoreError, StoreTimeout
from core.store import AccessLevel, Store
from models.models import Country, UserRole
from repos.base_repo import BaseRepo, OrderBy


class TestBaseRepo:
    async def test_create_then_find_by_id(self, store):
        repo = BaseRepo(store, Country)
        created = await repo.create({"country": "Portugal"})

        found = await repo.find_by_id(created.id)

        assert found is not None
        assert found.country == "Portugal"

    async def test_missing_rows_are_none_not_errors(self, store):
        repo = BaseRepo(store, Country)

        assert await repo.find_by_id(uuid.uuid4()) is None
        assert await repo.find_one({"country": "Atlantis"}) is None
        assert await repo.find_all({"country": "Atlantis"}) == []
        assert await repo.update_by_id(uuid.uuid4(), {"country": "X"}) is None
        assert await repo.delete_by_id(uuid.uuid4()) is False

    async def test_none_filters_are_ignored(self, store):
        repo = BaseRepo(store, Country)
        await repo.create({"country": "Spain"})

        assert await repo.find_one({"country": None}) is not None
        assert await repo.count({"country": None}) == 1

    async def test_find_all_order_limit_offset(self, store):
        repo = BaseRepo(store, Country)
        for name in ("Chile", "Austria", "Brazil"):
            await repo.create({"country": name})

        ordered = await repo.find_all(order_by=OrderBy("country"))
        assert [c.country for c in ordered] == ["Austria", "Brazil", "Chile"]

        page = await repo.find_all(order_by=OrderBy("country", ascending=False), limit=1, offset=1)
        assert [c.country for c in page] == ["Brazil"]

    async def test_update_count_exists_delete(self, store):
        repo = BaseRepo(store, Country)
        row = await repo.create({"country": "Italy"})

        updated = await repo.update_by_id(row.id, {"country": "Malta"})
        assert updated.country == "Malta"
        assert await repo.exists({"country": "Malta"})
        assert not await repo.exists({"country": "Italy"})

        assert await repo.delete_by_id(row.id) is True
        assert await repo.count() == 0

    async def test_unique_violation_is_typed(self, store):
        repo = BaseRepo(store, UserRole)
        await repo.create({"role": "renter"})

        with pytest.raises(ConstraintViolation) as exc_info:
            await repo.create({"role": "renter"})

        assert isinstance(exc_info.value, StoreError)
        assert exc_info.value.code

    async def test_get_or_create_is_idempotent(self, store):
        repo = BaseRepo(store, UserRole)

        first, created_first = await repo.get_or_create({"role": "agent"}, access=AccessLevel.ELEVATED)
        second, created_second = await repo.get_or_create({"role": "agent"}, access=AccessLevel.ELEVATED)

        assert created_first is True
        assert created_second is False
        assert first.id == second.id


class TestStore:
    async def test_timeout_becomes_store_timeout(self, store):
        slow = Store(
            restricted=store._factories[AccessLevel.RESTRICTED],
            elevated=store._factories[AccessLevel.ELEVATED],
            timeout=0.05,
        )

        async def work(db):
            await asyncio.sleep(1)

        with pytest.raises(StoreTimeout):
            await slow.run(work)

    async def test_ping(self, store):
        assert await store.ping() is True
        assert await store.ping(AccessLevel.ELEVATED) is True

    async def test_failed_work_is_rolled_back(self, store):
        repo = BaseRepo(store, Country)

        async def work(db):
            db.add(Country(country="Ghost"))
            await db.flush()
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await store.run(work)

        assert await repo.find_one({"country": "Ghost"}) is None
