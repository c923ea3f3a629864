# ============================================================
# Module : backend/infra/repo/celestial_object_repo.py
# Objet  : Accès SQL (async) aux objets célestes.
# Notes  : table unique `celestial_objects`, variante étoile/planète portée par `kind`.
# ============================================================

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...domain.entities import CelestialObject, Planet, PlanetType, Position, Star, StarType
from ...domain.gateways import CelestialObjectGateway
from .db import session_scope
from .models import CelestialObjectORM


def to_entity(row: CelestialObjectORM) -> CelestialObject:
    """Construit l'entité du domaine (Star ou Planet) à partir d'une ligne."""
    position = None
    if row.position_x is not None:
        position = Position(x=row.position_x, y=row.position_y, z=row.position_z)
    common = {
        "id": row.id,
        "name": row.name,
        "description": row.description,
        "image": row.image or "",
        "position": position,
        "mass": row.mass,
        "temperature": row.temperature,
        "radius": row.radius,
        "creation_date": row.creation_date,
        "modification_date": row.modification_date,
        "owner_id": row.owner_id,
        "is_public": row.is_public,
        "map_id": row.map_id,
    }
    if row.kind == "star":
        return Star(**common, brightness=row.brightness, star_type=StarType(row.star_type))
    return Planet(
        **common,
        is_water=bool(row.is_water),
        is_life=bool(row.is_life),
        planet_type=PlanetType(row.planet_type),
    )


def _apply(row: CelestialObjectORM, obj: CelestialObject) -> None:
    """Recopie les champs de l'entité sur la ligne (hors identifiant)."""
    row.kind = obj.kind
    row.name = obj.name
    row.description = obj.description
    row.image = obj.image
    row.position_x = obj.position.x if obj.position else None
    row.position_y = obj.position.y if obj.position else None
    row.position_z = obj.position.z if obj.position else None
    row.mass = obj.mass
    row.temperature = obj.temperature
    row.radius = obj.radius
    row.creation_date = obj.creation_date
    row.modification_date = obj.modification_date
    row.owner_id = obj.owner_id
    row.is_public = obj.is_public
    row.map_id = obj.map_id
    if isinstance(obj, Star):
        row.brightness = obj.brightness
        row.star_type = obj.star_type.value
        row.is_water = row.is_life = row.planet_type = None
    else:
        row.is_water = obj.is_water
        row.is_life = obj.is_life
        row.planet_type = obj.planet_type.value
        row.brightness = row.star_type = None


class SqlCelestialObjectRepo(CelestialObjectGateway):
    """Gateway SQLAlchemy des objets célestes ; une session par opération."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = session_factory

    async def get_by_id(self, object_id: int) -> CelestialObject | None:
        async with session_scope(self._sessions) as session:
            row = await session.get(CelestialObjectORM, object_id)
            return to_entity(row) if row else None

    async def _page(self, where, page: int, page_size: int) -> list[CelestialObject]:
        stmt = (
            select(CelestialObjectORM)
            .where(where)
            .order_by(CelestialObjectORM.id)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        async with session_scope(self._sessions) as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [to_entity(r) for r in rows]

    async def _count(self, where) -> int:
        stmt = select(func.count()).select_from(CelestialObjectORM).where(where)
        async with session_scope(self._sessions) as session:
            return (await session.execute(stmt)).scalar_one()

    async def list_by_owner(self, owner_id: int, page: int, page_size: int) -> list[CelestialObject]:
        return await self._page(CelestialObjectORM.owner_id == owner_id, page, page_size)

    async def list_public(self, page: int, page_size: int) -> list[CelestialObject]:
        return await self._page(CelestialObjectORM.is_public.is_(True), page, page_size)

    async def count_by_owner(self, owner_id: int) -> int:
        return await self._count(CelestialObjectORM.owner_id == owner_id)

    async def count_public(self) -> int:
        return await self._count(CelestialObjectORM.is_public.is_(True))

    async def add(self, obj: CelestialObject) -> CelestialObject:
        row = CelestialObjectORM()
        _apply(row, obj)
        async with session_scope(self._sessions) as session:
            session.add(row)
            await session.flush()
            return to_entity(row)

    async def update(self, object_id: int, obj: CelestialObject) -> CelestialObject | None:
        async with session_scope(self._sessions) as session:
            row = await session.get(CelestialObjectORM, object_id)
            if row is None:
                return None
            _apply(row, obj)
            await session.flush()
            return to_entity(row)

    async def remove(self, object_id: int) -> bool:
        async with session_scope(self._sessions) as session:
            row = await session.get(CelestialObjectORM, object_id)
            if row is None:
                return False
            await session.delete(row)
            return True

    async def set_map_id(
        self, object_id: int, map_id: int | None, modification_date: datetime
    ) -> CelestialObject | None:
        async with session_scope(self._sessions) as session:
            row = await session.get(CelestialObjectORM, object_id)
            if row is None:
                return None
            row.map_id = map_id
            row.modification_date = modification_date
            if map_id is None:
                row.position_x = row.position_y = row.position_z = None
            await session.flush()
            return to_entity(row)
