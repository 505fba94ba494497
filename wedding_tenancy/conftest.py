import datetime as dt
import itertools

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker

from wedding_tenancy.config.database import create_engine
from wedding_tenancy.models import BaseModel, GuestSide
from wedding_tenancy.repositories import TenantRepositories


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Fresh SQLite database with the full schema for each test."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'wedding_tenancy.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    session_maker = async_sessionmaker(db_engine, expire_on_commit=False)
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def repos(db_session) -> TenantRepositories:
    return TenantRepositories.for_session(db_session)


@pytest.fixture
def make_event(repos):
    counter = itertools.count(1)

    async def _make(created_by: int = 1, **overrides):
        number = next(counter)
        data = {
            "title": f"Wedding {number}",
            "couple_names": "Ana & Raj",
            "bride_name": "Ana",
            "groom_name": "Raj",
            "start_date": dt.date(2030, 5, number),
            "end_date": dt.date(2030, 5, number + 2),
            "location": "Udaipur",
            "created_by": created_by,
        }
        data.update(overrides)
        return await repos.events.create(data)

    return _make


@pytest_asyncio.fixture
async def event(make_event):
    return await make_event()


@pytest_asyncio.fixture
async def other_event(make_event):
    return await make_event(created_by=2, title="Other wedding")


@pytest.fixture
def make_guest(repos):
    counter = itertools.count(1)

    async def _make(tenant_id: int, **overrides):
        number = next(counter)
        data = {
            "first_name": f"Guest{number}",
            "last_name": "Sharma",
            "email": f"guest{number}@example.com",
            "side": GuestSide.BRIDE,
        }
        data.update(overrides)
        return await repos.guests.create(data, tenant_id)

    return _make


@pytest.fixture
def make_accommodation(repos):
    async def _make(tenant_id: int, **overrides):
        data = {"name": "Lake Palace", "room_type": "Deluxe", "capacity": 2, "total_rooms": 10}
        data.update(overrides)
        return await repos.accommodations.create(data, tenant_id)

    return _make


@pytest.fixture
def make_ceremony(repos):
    async def _make(tenant_id: int, **overrides):
        data = {
            "name": "Sangeet",
            "date": dt.date(2030, 5, 1),
            "start_time": "18:00",
            "end_time": "23:00",
            "location": "Courtyard",
        }
        data.update(overrides)
        return await repos.ceremonies.create(data, tenant_id)

    return _make


@pytest.fixture
def make_meal_option(repos):
    async def _make(tenant_id: int, ceremony_id: int, **overrides):
        data = {"ceremony_id": ceremony_id, "name": "Paneer Tikka", "is_vegetarian": True}
        data.update(overrides)
        return await repos.meals.create(data, tenant_id)

    return _make
