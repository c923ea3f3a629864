# ============================================================
# Module : backend/infra/repo/map_repo.py
# Objet  : Accès SQL (async) aux cartes.
# Notes  : la collection d'objets est dérivée par requête sur `celestial_objects.map_id`.
# ============================================================

from __future__ import annotations

from collections import defaultdict

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...domain.entities import Map
from ...domain.gateways import MapGateway
from .celestial_object_repo import to_entity as object_to_entity
from .db import session_scope
from .models import CelestialObjectORM, MapORM


def _to_entity(row: MapORM, objects: list) -> Map:
    return Map(
        id=row.id,
        name=row.name,
        owner_id=row.owner_id,
        is_public=row.is_public,
        creation_date=row.creation_date,
        modification_date=row.modification_date,
        celestial_objects=objects,
    )


class SqlMapRepo(MapGateway):
    """Gateway SQLAlchemy des cartes ; une session par opération."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = session_factory

    @staticmethod
    async def _hydrate(session: AsyncSession, rows: list[MapORM]) -> list[Map]:
        """Charge en une requête les objets des cartes `rows`."""
        if not rows:
            return []
        stmt = (
            select(CelestialObjectORM)
            .where(CelestialObjectORM.map_id.in_([r.id for r in rows]))
            .order_by(CelestialObjectORM.id)
        )
        by_map = defaultdict(list)
        for obj in (await session.execute(stmt)).scalars().all():
            by_map[obj.map_id].append(object_to_entity(obj))
        return [_to_entity(r, by_map[r.id]) for r in rows]

    async def get_by_id(self, map_id: int) -> Map | None:
        async with session_scope(self._sessions) as session:
            row = await session.get(MapORM, map_id)
            if row is None:
                return None
            return (await self._hydrate(session, [row]))[0]

    async def _page(self, where, page: int, page_size: int) -> list[Map]:
        stmt = (
            select(MapORM)
            .where(where)
            .order_by(MapORM.id)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        async with session_scope(self._sessions) as session:
            rows = list((await session.execute(stmt)).scalars().all())
            return await self._hydrate(session, rows)

    async def _count(self, where) -> int:
        stmt = select(func.count()).select_from(MapORM).where(where)
        async with session_scope(self._sessions) as session:
            return (await session.execute(stmt)).scalar_one()

    async def list_by_owner(self, owner_id: int, page: int, page_size: int) -> list[Map]:
        return await self._page(MapORM.owner_id == owner_id, page, page_size)

    async def list_public(self, page: int, page_size: int) -> list[Map]:
        return await self._page(MapORM.is_public.is_(True), page, page_size)

    async def count_by_owner(self, owner_id: int) -> int:
        return await self._count(MapORM.owner_id == owner_id)

    async def count_public(self) -> int:
        return await self._count(MapORM.is_public.is_(True))

    async def add(self, map_: Map) -> Map:
        row = MapORM(
            name=map_.name,
            owner_id=map_.owner_id,
            is_public=map_.is_public,
            creation_date=map_.creation_date,
            modification_date=map_.modification_date,
        )
        async with session_scope(self._sessions) as session:
            session.add(row)
            await session.flush()
            return _to_entity(row, [])

    async def update(self, map_id: int, map_: Map) -> Map | None:
        async with session_scope(self._sessions) as session:
            row = await session.get(MapORM, map_id)
            if row is None:
                return None
            row.name = map_.name
            row.owner_id = map_.owner_id
            row.is_public = map_.is_public
            row.creation_date = map_.creation_date
            row.modification_date = map_.modification_date
            await session.flush()
            return (await self._hydrate(session, [row]))[0]

    async def remove(self, map_id: int) -> bool:
        async with session_scope(self._sessions) as session:
            row = await session.get(MapORM, map_id)
            if row is None:
                return False
            # SQLite n'applique ON DELETE SET NULL qu'avec PRAGMA foreign_keys
            await session.execute(
                update(CelestialObjectORM)
                .where(CelestialObjectORM.map_id == map_id)
                .values(map_id=None, position_x=None, position_y=None, position_z=None)
            )
            await session.delete(row)
            return True
