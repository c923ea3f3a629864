# ============================================================
# Module : backend/services/celestial_objects.py
# Objet  : Autorisation et cycle de vie des objets célestes.
# Contexte : Règles de propriété et de visibilité appliquées avant chaque accès au
#            dépôt ; validation des champs avant toute écriture.
# ============================================================

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from backend.app.metrics import AUTHZ_DENIALS
from backend.domain.entities import CelestialObject
from backend.domain.errors import Forbidden, NotFound
from backend.domain.gateways import CelestialObjectGateway
from backend.domain.validation import validate_celestial_object, validate_pagination

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def is_visible_to(obj: CelestialObject, user_id: int | None) -> bool:
    """Un objet est visible s'il est public ou si `user_id` en est le propriétaire."""
    return obj.is_public or (user_id is not None and obj.owner_id == user_id)


class CelestialObjectService:
    """Service d'accès aux objets célestes avec contrôle de propriété.

    Responsabilités:
    - Appliquer la visibilité (public/propriétaire) en lecture.
    - Estampiller propriétaire et dates à la création et à la modification.
    - Exposer aux autres services les vérifications croisées (existence, propriété, rattachement).
    """

    def __init__(self, objects: CelestialObjectGateway, clock: Clock = utc_now) -> None:
        """Initialise le service.

        Paramètres:
        - objects: gateway de persistance des objets célestes.
        - clock: source de l'horodatage (UTC), injectable pour les tests.
        """
        self.objects = objects
        self._clock = clock
        self._log = structlog.get_logger(__name__).bind(component="celestial_object_service")

    def _deny(self, operation: str, object_id: int, user_id: int | None, message: str) -> Forbidden:
        AUTHZ_DENIALS.labels(entity="celestial_object", operation=operation).inc()
        self._log.info(
            "authorization_denied", operation=operation, object_id=object_id, user_id=user_id
        )
        return Forbidden(message)

    async def fetch(self, object_id: int, requesting_user_id: int | None) -> CelestialObject | None:
        """Retourne l'objet s'il est visible par le demandeur.

        Retour: l'objet, ou None s'il n'existe pas.
        Lève `Forbidden` si l'objet est privé et que le demandeur n'en est pas propriétaire
        (ou est anonyme).
        """
        obj = await self.objects.get_by_id(object_id)
        if obj is None:
            return None
        if not is_visible_to(obj, requesting_user_id):
            raise self._deny(
                "fetch",
                object_id,
                requesting_user_id,
                f"You are not allowed to access the celestial object n°{object_id}.",
            )
        return obj

    async def list_own(self, owner_id: int, page: int, page_size: int) -> list[CelestialObject]:
        validate_pagination(page, page_size)
        return await self.objects.list_by_owner(owner_id, page, page_size)

    async def list_public(self, page: int, page_size: int) -> list[CelestialObject]:
        validate_pagination(page, page_size)
        return await self.objects.list_public(page, page_size)

    async def count_own(self, owner_id: int) -> int:
        return await self.objects.count_by_owner(owner_id)

    async def count_public(self) -> int:
        return await self.objects.count_public()

    async def create(self, obj: CelestialObject, owner_id: int) -> CelestialObject:
        """Valide puis persiste un nouvel objet appartenant à `owner_id`.

        L'objet est créé détaché et sans position : le rattachement à une carte passe par
        `MapService.link_celestial_object`, qui vérifie la propriété de la carte.
        """
        validate_celestial_object(obj)
        now = self._clock()
        stored = obj.model_copy(
            update={
                "id": None,
                "owner_id": owner_id,
                "creation_date": now,
                "modification_date": now,
                "map_id": None,
                "position": None,
            }
        )
        created = await self.objects.add(stored)
        self._log.info("celestial_object_created", object_id=created.id, owner_id=owner_id)
        return created

    async def update(self, object_id: int, obj: CelestialObject, owner_id: int) -> CelestialObject:
        """Remplace les champs modifiables d'un objet existant.

        Propriétaire, date de création et rattachement à une carte sont conservés ; seule la
        date de modification est renouvelée. La propriété n'est pas vérifiée ici. Une position
        n'est acceptée que si l'objet stocké est déjà rattaché à une carte ; le `map_id` du
        payload est ignoré.
        """
        existing = await self.objects.get_by_id(object_id)
        if existing is None:
            raise NotFound("celestial object", object_id)
        validate_celestial_object(obj.model_copy(update={"map_id": existing.map_id}))
        if existing.owner_id != owner_id:
            self._log.warning(
                "celestial_object_updated_by_non_owner",
                object_id=object_id,
                owner_id=existing.owner_id,
                user_id=owner_id,
            )
        merged = obj.model_copy(
            update={
                "id": object_id,
                "owner_id": existing.owner_id,
                "creation_date": existing.creation_date,
                "modification_date": self._clock(),
                "map_id": existing.map_id,
            }
        )
        updated = await self.objects.update(object_id, merged)
        if updated is None:
            raise NotFound("celestial object", object_id)
        return updated

    async def delete(self, object_id: int, requesting_user_id: int) -> None:
        obj = await self.require(object_id)
        self.check_owner(obj, requesting_user_id, "delete")
        await self.objects.remove(object_id)
        self._log.info("celestial_object_deleted", object_id=object_id, user_id=requesting_user_id)

    async def require(self, object_id: int) -> CelestialObject:
        """Retourne l'objet ou lève `NotFound`."""
        obj = await self.objects.get_by_id(object_id)
        if obj is None:
            raise NotFound("celestial object", object_id)
        return obj

    def check_owner(self, obj: CelestialObject, user_id: int | None, operation: str) -> None:
        """Lève `Forbidden` si `user_id` n'est pas le propriétaire de `obj`."""
        if user_id is None or obj.owner_id != user_id:
            raise self._deny(
                operation,
                obj.id,
                user_id,
                f"You are not the owner of the celestial object n°{obj.id}.",
            )

    async def assign_map(self, object_id: int, map_id: int | None) -> CelestialObject:
        """Rattache l'objet à `map_id`, ou le détache (position effacée) si None."""
        updated = await self.objects.set_map_id(object_id, map_id, self._clock())
        if updated is None:
            raise NotFound("celestial object", object_id)
        return updated
