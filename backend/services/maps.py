# ============================================================
# Module : backend/services/maps.py
# Objet  : Autorisation et cycle de vie des cartes, rattachement des objets célestes.
# Contexte : Les vérifications croisées sur les objets passent par
#            CelestialObjectService ; le rattachement est porté par l'objet (map_id).
# ============================================================

from __future__ import annotations

import structlog

from backend.app.metrics import AUTHZ_DENIALS, MAP_LINK_OPERATIONS
from backend.domain.entities import Map
from backend.domain.errors import AlreadyLinked, Forbidden, NotFound, NotLinked
from backend.domain.gateways import MapGateway
from backend.domain.validation import validate_map, validate_pagination
from backend.services.celestial_objects import (
    CelestialObjectService,
    Clock,
    is_visible_to,
    utc_now,
)


class MapService:
    """Service d'accès aux cartes avec contrôle de propriété.

    Responsabilités:
    - Appliquer la visibilité des cartes et élaguer les objets non visibles du demandeur.
    - Estampiller propriétaire et dates à la création et à la modification.
    - Lier/délier un objet céleste d'une carte en vérifiant les deux propriétés.
    """

    def __init__(
        self,
        maps: MapGateway,
        celestial_objects: CelestialObjectService,
        clock: Clock = utc_now,
    ) -> None:
        """Initialise le service.

        Paramètres:
        - maps: gateway de persistance des cartes.
        - celestial_objects: service des objets, pour les vérifications croisées.
        - clock: source de l'horodatage (UTC).
        """
        self.maps = maps
        self.celestial_objects = celestial_objects
        self._clock = clock
        self._log = structlog.get_logger(__name__).bind(component="map_service")

    def _deny(self, operation: str, map_id: int, user_id: int | None, message: str) -> Forbidden:
        AUTHZ_DENIALS.labels(entity="map", operation=operation).inc()
        self._log.info("authorization_denied", operation=operation, map_id=map_id, user_id=user_id)
        return Forbidden(message)

    @staticmethod
    def _visible_view(map_: Map, requesting_user_id: int | None) -> Map:
        """Copie de la carte sans les objets que le demandeur ne peut pas voir."""
        if requesting_user_id is not None and map_.owner_id == requesting_user_id:
            return map_
        visible = [o for o in map_.celestial_objects if is_visible_to(o, requesting_user_id)]
        return map_.model_copy(update={"celestial_objects": visible})

    async def _require(self, map_id: int) -> Map:
        map_ = await self.maps.get_by_id(map_id)
        if map_ is None:
            raise NotFound("map", map_id)
        return map_

    async def fetch(self, map_id: int, requesting_user_id: int | None) -> Map | None:
        """Retourne la carte visible par le demandeur, ou None si elle n'existe pas.

        Lève `Forbidden` pour une carte privée consultée par un non-propriétaire. Pour un
        non-propriétaire, les objets privés d'autrui sont retirés de la collection.
        """
        map_ = await self.maps.get_by_id(map_id)
        if map_ is None:
            return None
        if not map_.is_public and (requesting_user_id is None or map_.owner_id != requesting_user_id):
            raise self._deny(
                "fetch", map_id, requesting_user_id, f"You are not allowed to access the map n°{map_id}."
            )
        return self._visible_view(map_, requesting_user_id)

    async def list_own(self, owner_id: int, page: int, page_size: int) -> list[Map]:
        validate_pagination(page, page_size)
        return await self.maps.list_by_owner(owner_id, page, page_size)

    async def list_public(
        self, page: int, page_size: int, requesting_user_id: int | None = None
    ) -> list[Map]:
        """Page des cartes publiques, collections élaguées comme pour `fetch`."""
        validate_pagination(page, page_size)
        maps = await self.maps.list_public(page, page_size)
        return [self._visible_view(m, requesting_user_id) for m in maps]

    async def count_own(self, owner_id: int) -> int:
        return await self.maps.count_by_owner(owner_id)

    async def count_public(self) -> int:
        return await self.maps.count_public()

    async def create(self, map_: Map, owner_id: int) -> Map:
        validate_map(map_)
        now = self._clock()
        stored = map_.model_copy(
            update={
                "id": None,
                "owner_id": owner_id,
                "creation_date": now,
                "modification_date": now,
                "celestial_objects": [],
            }
        )
        created = await self.maps.add(stored)
        self._log.info("map_created", map_id=created.id, owner_id=owner_id)
        return created

    async def update(self, map_id: int, map_: Map, requesting_user_id: int) -> Map:
        """Remplace nom et visibilité d'une carte existante.

        Le propriétaire déclaré (`map_.owner_id`, ou le demandeur à défaut) doit être le
        propriétaire enregistré. Propriétaire, date de création et collection sont conservés.
        """
        existing = await self._require(map_id)
        declared_owner = map_.owner_id if map_.owner_id is not None else requesting_user_id
        if existing.owner_id != declared_owner:
            raise self._deny(
                "update", map_id, requesting_user_id, f"You are not the owner of the map n°{map_id}."
            )
        validate_map(map_)
        merged = map_.model_copy(
            update={
                "id": map_id,
                "owner_id": existing.owner_id,
                "creation_date": existing.creation_date,
                "modification_date": self._clock(),
                "celestial_objects": [],
            }
        )
        updated = await self.maps.update(map_id, merged)
        if updated is None:
            raise NotFound("map", map_id)
        return updated

    async def delete(self, map_id: int, requesting_user_id: int) -> None:
        """Supprime la carte ; ses objets sont détachés, pas supprimés."""
        existing = await self._require(map_id)
        if existing.owner_id != requesting_user_id:
            raise self._deny(
                "delete", map_id, requesting_user_id, f"You are not the owner of the map n°{map_id}."
            )
        await self.maps.remove(map_id)
        self._log.info("map_deleted", map_id=map_id, user_id=requesting_user_id)

    async def _check_pair(self, map_id: int, object_id: int, requesting_user_id: int, operation: str):
        """Charge carte et objet puis vérifie les propriétés.

        Ordre des erreurs: objet absent, carte absente, objet d'autrui, carte d'autrui.
        """
        map_ = await self.maps.get_by_id(map_id)
        obj = await self.celestial_objects.require(object_id)
        if map_ is None:
            raise NotFound("map", map_id)
        self.celestial_objects.check_owner(obj, requesting_user_id, operation)
        if map_.owner_id != requesting_user_id:
            raise self._deny(
                operation,
                map_id,
                requesting_user_id,
                f"You are not the owner of the map n°{map_id}.",
            )
        return map_, obj

    async def link_celestial_object(self, map_id: int, object_id: int, requesting_user_id: int) -> Map:
        """Ajoute l'objet à la carte ; les deux doivent appartenir au demandeur.

        Lève `AlreadyLinked` si l'objet est déjà dans cette carte ou rattaché à une autre.
        """
        map_, obj = await self._check_pair(map_id, object_id, requesting_user_id, "link")
        if map_.contains(object_id):
            MAP_LINK_OPERATIONS.labels(operation="link", result="already_linked").inc()
            raise AlreadyLinked(map_id, object_id)
        if obj.map_id is not None:
            MAP_LINK_OPERATIONS.labels(operation="link", result="already_linked").inc()
            raise AlreadyLinked(
                map_id,
                object_id,
                f"The celestial object n°{object_id} is already in the map n°{obj.map_id}.",
            )
        await self.celestial_objects.assign_map(object_id, map_id)
        MAP_LINK_OPERATIONS.labels(operation="link", result="ok").inc()
        self._log.info("celestial_object_linked", map_id=map_id, object_id=object_id)
        return await self._require(map_id)

    async def unlink_celestial_object(
        self, map_id: int, object_id: int, requesting_user_id: int
    ) -> Map:
        """Retire l'objet de la carte (position effacée) ; lève `NotLinked` s'il n'y est pas."""
        map_, _ = await self._check_pair(map_id, object_id, requesting_user_id, "unlink")
        if not map_.contains(object_id):
            MAP_LINK_OPERATIONS.labels(operation="unlink", result="not_linked").inc()
            raise NotLinked(map_id, object_id)
        await self.celestial_objects.assign_map(object_id, None)
        MAP_LINK_OPERATIONS.labels(operation="unlink", result="ok").inc()
        self._log.info("celestial_object_unlinked", map_id=map_id, object_id=object_id)
        return await self._require(map_id)
