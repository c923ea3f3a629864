# ============================================================
# Module : backend/infra/repo/user_repo.py
# Objet  : Accès SQL (async) aux utilisateurs.
# ============================================================

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...domain.entities import Role, User
from ...domain.errors import DuplicateUser
from ...domain.gateways import UserGateway
from .db import session_scope
from .models import UserORM


def _to_entity(row: UserORM) -> User:
    return User(
        id=row.id,
        email=row.email,
        username=row.username,
        password=row.password,
        role=Role(row.role),
        refresh_token=row.refresh_token,
        refresh_token_expiry_time=row.refresh_token_expiry_time,
        creation_date=row.creation_date,
        modification_date=row.modification_date,
    )


def _duplicate(email: str) -> DuplicateUser:
    # seule contrainte d'unicité de la table: users.email
    return DuplicateUser(f"A user with the email {email} already exists.")


def _apply(row: UserORM, user: User) -> None:
    row.email = user.email
    row.username = user.username
    row.password = user.password
    row.role = user.role.value
    row.refresh_token = user.refresh_token
    row.refresh_token_expiry_time = user.refresh_token_expiry_time
    row.creation_date = user.creation_date
    row.modification_date = user.modification_date


class SqlUserRepo(UserGateway):
    """Gateway SQLAlchemy des utilisateurs."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = session_factory

    async def get_by_id(self, user_id: int) -> User | None:
        async with session_scope(self._sessions) as session:
            row = await session.get(UserORM, user_id)
            return _to_entity(row) if row else None

    async def get_by_email(self, email: str) -> User | None:
        async with session_scope(self._sessions) as session:
            stmt = select(UserORM).where(UserORM.email == email).limit(1)
            row = (await session.execute(stmt)).scalars().first()
            return _to_entity(row) if row else None

    async def list_all(self, page: int, page_size: int) -> list[User]:
        stmt = select(UserORM).order_by(UserORM.id).offset((page - 1) * page_size).limit(page_size)
        async with session_scope(self._sessions) as session:
            return [_to_entity(r) for r in (await session.execute(stmt)).scalars().all()]

    async def count(self) -> int:
        async with session_scope(self._sessions) as session:
            return (await session.execute(select(func.count()).select_from(UserORM))).scalar_one()

    async def add(self, user: User) -> User:
        row = UserORM()
        _apply(row, user)
        try:
            async with session_scope(self._sessions) as session:
                session.add(row)
                await session.flush()
                return _to_entity(row)
        except IntegrityError as exc:
            raise _duplicate(user.email) from exc

    async def update(self, user_id: int, user: User) -> User | None:
        try:
            async with session_scope(self._sessions) as session:
                row = await session.get(UserORM, user_id)
                if row is None:
                    return None
                _apply(row, user)
                await session.flush()
                return _to_entity(row)
        except IntegrityError as exc:
            raise _duplicate(user.email) from exc

    async def remove(self, user_id: int) -> bool:
        async with session_scope(self._sessions) as session:
            row = await session.get(UserORM, user_id)
            if row is None:
                return False
            await session.delete(row)
            return True
