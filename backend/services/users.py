# ============================================================
# Module : backend/services/users.py
# Objet  : Cycle de vie des utilisateurs et état des jetons de rafraîchissement.
# Contexte : Les mots de passe sont hachés (passlib) avant toute écriture ;
#            l'unicité de l'email est vérifiée par le service.
# ============================================================

from __future__ import annotations

from datetime import datetime

import structlog

from backend.domain.auth import hash_password, verify_password
from backend.domain.entities import User
from backend.domain.errors import DuplicateUser, NotFound
from backend.domain.gateways import UserGateway
from backend.domain.validation import validate_pagination, validate_user
from backend.services.celestial_objects import Clock, utc_now


class UserService:
    """Service de gestion des utilisateurs.

    Responsabilités:
    - Valider et persister les comptes (email unique, mot de passe haché).
    - Authentifier un couple email/mot de passe.
    - Mémoriser ou révoquer le jeton de rafraîchissement d'un utilisateur.
    """

    def __init__(self, users: UserGateway, clock: Clock = utc_now) -> None:
        self.users = users
        self._clock = clock
        self._log = structlog.get_logger(__name__).bind(component="user_service")

    async def _require(self, user_id: int) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFound("user", user_id)
        return user

    async def get_by_id(self, user_id: int) -> User | None:
        return await self.users.get_by_id(user_id)

    async def get_by_email(self, email: str) -> User | None:
        return await self.users.get_by_email(email)

    async def list(self, page: int, page_size: int) -> list[User]:
        validate_pagination(page, page_size)
        return await self.users.list_all(page, page_size)

    async def count(self) -> int:
        return await self.users.count()

    async def create(self, user: User) -> User:
        """Valide puis crée un compte.

        Retour: l'utilisateur stocké (mot de passe haché).
        Lève `ValidationError` ou `DuplicateUser` si l'email est déjà utilisé.
        """
        validate_user(user)
        if await self.users.get_by_email(user.email) is not None:
            raise DuplicateUser(f"A user with the email {user.email} already exists.")
        now = self._clock()
        created = await self.users.add(
            user.model_copy(
                update={
                    "id": None,
                    "password": hash_password(user.password),
                    "refresh_token": None,
                    "refresh_token_expiry_time": None,
                    "creation_date": now,
                    "modification_date": now,
                }
            )
        )
        self._log.info("user_created", user_id=created.id)
        return created

    async def update(self, user_id: int, user: User) -> User:
        """Remplace email, nom et mot de passe ; rôle et jeton de rafraîchissement sont conservés."""
        existing = await self._require(user_id)
        validate_user(user)
        other = await self.users.get_by_email(user.email)
        if other is not None and other.id != user_id:
            raise DuplicateUser(f"A user with the email {user.email} already exists.")
        merged = existing.model_copy(
            update={
                "email": user.email,
                "username": user.username,
                "password": hash_password(user.password),
                "modification_date": self._clock(),
            }
        )
        updated = await self.users.update(user_id, merged)
        if updated is None:
            raise NotFound("user", user_id)
        return updated

    async def delete(self, user_id: int) -> None:
        if not await self.users.remove(user_id):
            raise NotFound("user", user_id)
        self._log.info("user_deleted", user_id=user_id)

    async def authenticate(self, email: str, password: str) -> User | None:
        """Retourne l'utilisateur si le mot de passe correspond, sinon None."""
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password):
            self._log.info("login_failed", email=email)
            return None
        return user

    async def store_refresh_token(self, user_id: int, token: str, expiry: datetime) -> User:
        user = await self._require(user_id)
        updated = await self.users.update(
            user_id, user.model_copy(update={"refresh_token": token, "refresh_token_expiry_time": expiry})
        )
        if updated is None:
            raise NotFound("user", user_id)
        return updated

    async def revoke_refresh_token(self, user_id: int) -> None:
        user = await self._require(user_id)
        await self.users.update(
            user_id, user.model_copy(update={"refresh_token": None, "refresh_token_expiry_time": None})
        )
        self._log.info("refresh_token_revoked", user_id=user_id)
