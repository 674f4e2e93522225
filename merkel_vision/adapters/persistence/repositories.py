"""SQLAlchemy repository implementations."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from merkel_vision.adapters.persistence.models import LocationModel
from merkel_vision.application.ports.location_repo import LocationRepository
from merkel_vision.domain.entities.location import Location, LocationDraft
from merkel_vision.domain.errors import StoreUnavailableError
from merkel_vision.domain.value_objects.geo_point import GeoPoint

# ─── Mappers ─────────────────────────────────────────────────────────


def _location_to_domain(m: LocationModel) -> Location:
    return Location(
        id=m.id,
        owner_id=m.owner_id,
        name=m.name,
        coordinates=GeoPoint(latitude=m.latitude, longitude=m.longitude),
        address=m.address,
        description=m.description,
        notes=m.notes,
        created_at=m.created_at,
        updated_at=m.updated_at,
    )


# ─── Repositories ────────────────────────────────────────────────────


class SqlLocationRepository(LocationRepository):
    """One short-lived session per operation; the repository itself is long-lived."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailableError(f"Location store error: {e}") from e

    async def list_by_owner(self, owner_id: str) -> list[Location]:
        async with self._session() as s:
            result = await s.execute(
                select(LocationModel)
                .where(LocationModel.owner_id == owner_id)
                .order_by(LocationModel.created_at)
            )
            return [_location_to_domain(m) for m in result.scalars()]

    async def insert(self, owner_id: str, draft: LocationDraft) -> Location:
        now = datetime.now(UTC)
        m = LocationModel(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            name=draft.name,
            address=draft.address,
            latitude=draft.latitude,
            longitude=draft.longitude,
            description=draft.description,
            notes=draft.notes,
            created_at=now,
            updated_at=now,
        )
        async with self._session() as s:
            s.add(m)
            await s.commit()
            return _location_to_domain(m)

    async def merge_update(
        self, owner_id: str, location_id: str, fields: dict[str, Any]
    ) -> Location | None:
        async with self._session() as s:
            m = await s.get(LocationModel, location_id)
            if m is None or m.owner_id != owner_id:
                return None
            for name, value in fields.items():
                setattr(m, name, value)
            m.updated_at = datetime.now(UTC)
            await s.commit()
            return _location_to_domain(m)

    async def delete(self, owner_id: str, location_id: str) -> bool:
        async with self._session() as s:
            result = await s.execute(
                delete(LocationModel).where(
                    LocationModel.id == location_id,
                    LocationModel.owner_id == owner_id,
                )
            )
            await s.commit()
            return result.rowcount > 0
