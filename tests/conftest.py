"""Pytest configuration and fixtures."""

import sys
from datetime import date, time
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

# Source root holds the top-level packages (core, models, repos, ...)
SOURCE_ROOT = Path(__file__).parent.parent / "reagent_bot"
sys.path.insert(0, str(SOURCE_ROOT))

from core.date_helper import DateHelper  # noqa: E402
from core.get_db import Base, make_session_factory  # noqa: E402
from core.store import AccessLevel, Store  # noqa: E402
import models.models  # noqa: E402,F401
from models.enums import PropertyStatus  # noqa: E402
from repos.property_repo import PropertyRepo  # noqa: E402
from repos.time_slot_repo import TimeSlotRepo  # noqa: E402
from services.reference_data_service import ReferenceDataService  # noqa: E402
from services.user_service import UserService  # noqa: E402

TODAY = date(2026, 10, 19)


@pytest.fixture
async def store(tmp_path):
    """Empty database; both access levels share the same file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = make_session_factory(engine)
    yield Store(restricted=factory, elevated=factory, timeout=5.0)

    await engine.dispose()


@pytest.fixture
async def seeded_store(store):
    """Database with roles, time slots and apartment types in place."""
    await ReferenceDataService(store).initialize_reference_data()
    return store


@pytest.fixture
def dates():
    return DateHelper(clock=lambda: TODAY)


@pytest.fixture
async def renter(seeded_store):
    return await UserService(seeded_store).get_or_create_user(
        "whatsapp:+15550000001", "Rita Renter"
    )


@pytest.fixture
async def other_renter(seeded_store):
    return await UserService(seeded_store).get_or_create_user("+15550000002", "Omar")


@pytest.fixture
async def slots(seeded_store):
    return await TimeSlotRepo(seeded_store).list_ordered()


@pytest.fixture
def make_property(seeded_store):
    repo = PropertyRepo(seeded_store)

    async def factory(owner, price, status=PropertyStatus.ACTIVE, **fields):
        data = {
            "owner_id": owner.id,
            "address": fields.pop("address", f"{price} Main Street"),
            "price": Decimal(str(price)),
            "status": status,
        }
        data.update(fields)
        return await repo.create(data, access=AccessLevel.ELEVATED)

    return factory


@pytest.fixture
def slot_at(slots):
    def pick(hour: int):
        return next(slot for slot in slots if slot.start_time == time(hour, 0))

    return pick
