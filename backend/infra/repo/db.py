"""Utilitaires SQLAlchemy asynchrones (moteur, sessions, création des tables).

`DATABASE_URL` est normalisée vers un pilote asynchrone (`sqlite+aiosqlite`, `postgresql+psycopg`).
Les pannes de connexion sont traduites en `StoreUnavailable` dans `session_scope`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backend.domain.errors import StoreUnavailable
from backend.infra.repo.models import Base


def make_async_url(url: str) -> str:
    """Convertit une URL de base vers sa forme à pilote asynchrone."""
    if url.startswith("sqlite+aiosqlite"):
        return url
    if url.startswith("sqlite"):
        _, _, rest = url.partition("://")
        return f"sqlite+aiosqlite://{rest}"
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def get_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Crée un moteur asynchrone à partir de l'URL de base de données.

    Une base SQLite en mémoire est partagée par toutes les sessions (StaticPool), sinon chaque
    connexion verrait une base vide.
    """
    db_url = make_async_url(url)
    kwargs: dict = {"echo": echo}
    if db_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in db_url or db_url.endswith("://"):
            kwargs["poolclass"] = StaticPool
    return create_async_engine(db_url, **kwargs)


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Crée une factory de sessions asynchrones."""
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Crée les tables absentes (pas de migrations)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def session_scope(factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Contexte de session avec commit/rollback automatique.

    Lève `StoreUnavailable` si la base est injoignable ou son schéma absent.
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except (OperationalError, InterfaceError) as exc:
            await session.rollback()
            raise StoreUnavailable() from exc
        except Exception:
            await session.rollback()
            raise
