"""Tests for SqlLocationRepository against in-memory SQLite (aiosqlite)."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from merkel_vision.adapters.persistence.database import Base
from merkel_vision.adapters.persistence.repositories import SqlLocationRepository
from merkel_vision.domain.entities.location import LocationDraft
from merkel_vision.domain.errors import StoreUnavailableError


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def sql_repo(session_factory):
    return SqlLocationRepository(session_factory)


def _draft(name="HQ"):
    return LocationDraft(name=name, latitude=37.4220, longitude=-122.0841, address="1600 Amphitheatre Pkwy")


@pytest.mark.asyncio
async def test_insert_assigns_id_and_timestamps(sql_repo):
    loc = await sql_repo.insert("owner-1", _draft())
    assert len(loc.id) == 32
    assert loc.created_at is not None
    assert loc.created_at == loc.updated_at
    assert loc.latitude == 37.4220


@pytest.mark.asyncio
async def test_list_is_scoped_to_owner(sql_repo):
    await sql_repo.insert("owner-1", _draft("Mine"))
    await sql_repo.insert("owner-2", _draft("Theirs"))
    assert [loc.name for loc in await sql_repo.list_by_owner("owner-1")] == ["Mine"]


@pytest.mark.asyncio
async def test_merge_update(sql_repo):
    loc = await sql_repo.insert("owner-1", _draft())
    updated = await sql_repo.merge_update("owner-1", loc.id, {"name": "Headquarters", "latitude": 37.5})
    assert updated.name == "Headquarters"
    assert updated.latitude == 37.5
    assert updated.address == "1600 Amphitheatre Pkwy"
    assert updated.updated_at >= loc.updated_at

    listed = await sql_repo.list_by_owner("owner-1")
    assert listed[0].name == "Headquarters"


@pytest.mark.asyncio
async def test_merge_update_other_owner_is_none(sql_repo):
    loc = await sql_repo.insert("owner-1", _draft())
    assert await sql_repo.merge_update("owner-2", loc.id, {"name": "Stolen"}) is None
    assert await sql_repo.merge_update("owner-1", "missing", {"name": "x"}) is None


@pytest.mark.asyncio
async def test_delete(sql_repo):
    loc = await sql_repo.insert("owner-1", _draft())
    assert await sql_repo.delete("owner-2", loc.id) is False
    assert await sql_repo.delete("owner-1", loc.id) is True
    assert await sql_repo.delete("owner-1", loc.id) is False
    assert await sql_repo.list_by_owner("owner-1") == []


@pytest.mark.asyncio
async def test_database_errors_become_store_unavailable():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    repo = SqlLocationRepository(async_sessionmaker(engine, expire_on_commit=False))
    with pytest.raises(StoreUnavailableError):
        await repo.list_by_owner("owner-1")
    await engine.dispose()
