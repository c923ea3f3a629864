# ============================================================
# Module : backend/infra/repo/space_image_repo.py
# Objet  : Accès SQL (async) aux images spatiales.
# ============================================================

from __future__ import annotations

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...domain.entities import SpaceImage
from ...domain.gateways import SpaceImageGateway
from .db import session_scope
from .models import SpaceImageORM


def _to_entity(row: SpaceImageORM) -> SpaceImage:
    return SpaceImage(
        id=row.id,
        title=row.title,
        description=row.description,
        image=row.image,
        shooting_date=row.shooting_date,
    )


class SqlSpaceImageRepo(SpaceImageGateway):
    """Gateway SQLAlchemy des images spatiales."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = session_factory

    async def get_by_id(self, image_id: int) -> SpaceImage | None:
        async with session_scope(self._sessions) as session:
            row = await session.get(SpaceImageORM, image_id)
            return _to_entity(row) if row else None

    async def get_by_date(self, day: date) -> SpaceImage | None:
        stmt = select(SpaceImageORM).where(SpaceImageORM.shooting_date == day).limit(1)
        async with session_scope(self._sessions) as session:
            row = (await session.execute(stmt)).scalars().first()
            return _to_entity(row) if row else None

    async def list_all(self, page: int, page_size: int) -> list[SpaceImage]:
        stmt = (
            select(SpaceImageORM)
            .order_by(SpaceImageORM.id)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        async with session_scope(self._sessions) as session:
            return [_to_entity(r) for r in (await session.execute(stmt)).scalars().all()]

    async def count(self) -> int:
        async with session_scope(self._sessions) as session:
            stmt = select(func.count()).select_from(SpaceImageORM)
            return (await session.execute(stmt)).scalar_one()

    async def add(self, image: SpaceImage) -> SpaceImage:
        row = SpaceImageORM(
            title=image.title,
            description=image.description,
            image=image.image,
            shooting_date=image.shooting_date,
        )
        try:
            async with session_scope(self._sessions) as session:
                session.add(row)
                await session.flush()
                return _to_entity(row)
        except IntegrityError:
            # une requête concurrente a déjà stocké l'image de cette date
            existing = await self.get_by_date(image.shooting_date)
            if existing is None:
                raise
            return existing
