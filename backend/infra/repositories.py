"""
Repositories en mémoire.

Ce module fournit les implémentations non persistantes des gateways du domaine, utilisées quand
aucune `DATABASE_URL` n'est configurée (dev/tests). Les entités sont copiées en entrée comme en
sortie pour qu'aucun appelant ne modifie l'état stocké par référence.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from itertools import count
from typing import TypeVar

from backend.domain.entities import CelestialObject, Map, SpaceImage, User
from backend.domain.errors import DuplicateUser
from backend.domain.gateways import (
    CelestialObjectGateway,
    MapGateway,
    SpaceImageGateway,
    UserGateway,
)

T = TypeVar("T")


def _paginate(items: Iterable[T], page: int, page_size: int) -> list[T]:
    """Découpe la page `page` (base 1) d'une séquence déjà triée."""
    offset = (page - 1) * page_size
    return list(items)[offset : offset + page_size]


class InMemoryCelestialObjectRepo(CelestialObjectGateway):
    """
    Dépôt d'objets célestes en mémoire.

    Stocke les objets dans un dict local indexé par id, non persistant.
    """

    def __init__(self):
        """Initialise une base mémoire vide."""
        self._db: dict[int, CelestialObject] = {}
        self._ids = count(1)

    def _sorted(self) -> list[CelestialObject]:
        return [self._db[k] for k in sorted(self._db)]

    def in_map(self, map_id: int) -> list[CelestialObject]:
        """Objets rattachés à la carte `map_id`, triés par id."""
        return [o.model_copy(deep=True) for o in self._sorted() if o.map_id == map_id]

    def detach_all(self, map_id: int) -> None:
        """Détache (carte et position) tous les objets de la carte `map_id`."""
        for object_id, obj in self._db.items():
            if obj.map_id == map_id:
                self._db[object_id] = obj.model_copy(update={"map_id": None, "position": None})

    async def get_by_id(self, object_id: int) -> CelestialObject | None:
        obj = self._db.get(object_id)
        return obj.model_copy(deep=True) if obj else None

    async def list_by_owner(self, owner_id: int, page: int, page_size: int) -> list[CelestialObject]:
        owned = (o for o in self._sorted() if o.owner_id == owner_id)
        return [o.model_copy(deep=True) for o in _paginate(owned, page, page_size)]

    async def list_public(self, page: int, page_size: int) -> list[CelestialObject]:
        public = (o for o in self._sorted() if o.is_public)
        return [o.model_copy(deep=True) for o in _paginate(public, page, page_size)]

    async def count_by_owner(self, owner_id: int) -> int:
        return sum(1 for o in self._db.values() if o.owner_id == owner_id)

    async def count_public(self) -> int:
        return sum(1 for o in self._db.values() if o.is_public)

    async def add(self, obj: CelestialObject) -> CelestialObject:
        stored = obj.model_copy(update={"id": next(self._ids)}, deep=True)
        self._db[stored.id] = stored
        return stored.model_copy(deep=True)

    async def update(self, object_id: int, obj: CelestialObject) -> CelestialObject | None:
        if object_id not in self._db:
            return None
        stored = obj.model_copy(update={"id": object_id}, deep=True)
        self._db[object_id] = stored
        return stored.model_copy(deep=True)

    async def remove(self, object_id: int) -> bool:
        return self._db.pop(object_id, None) is not None

    async def set_map_id(
        self, object_id: int, map_id: int | None, modification_date: datetime
    ) -> CelestialObject | None:
        obj = self._db.get(object_id)
        if obj is None:
            return None
        changes: dict = {"map_id": map_id, "modification_date": modification_date}
        if map_id is None:
            changes["position"] = None
        self._db[object_id] = obj.model_copy(update=changes)
        return self._db[object_id].model_copy(deep=True)


class InMemoryMapRepo(MapGateway):
    """
    Dépôt de cartes en mémoire.

    La collection d'objets de chaque carte est recalculée à la lecture depuis le dépôt d'objets
    partagé, seule source de vérité des rattachements.
    """

    def __init__(self, objects: InMemoryCelestialObjectRepo):
        """Initialise une base mémoire vide adossée au dépôt d'objets `objects`."""
        self._db: dict[int, Map] = {}
        self._ids = count(1)
        self.objects = objects

    def _hydrate(self, map_: Map) -> Map:
        return map_.model_copy(update={"celestial_objects": self.objects.in_map(map_.id)}, deep=True)

    def _sorted(self) -> list[Map]:
        return [self._db[k] for k in sorted(self._db)]

    async def get_by_id(self, map_id: int) -> Map | None:
        map_ = self._db.get(map_id)
        return self._hydrate(map_) if map_ else None

    async def list_by_owner(self, owner_id: int, page: int, page_size: int) -> list[Map]:
        owned = (m for m in self._sorted() if m.owner_id == owner_id)
        return [self._hydrate(m) for m in _paginate(owned, page, page_size)]

    async def list_public(self, page: int, page_size: int) -> list[Map]:
        public = (m for m in self._sorted() if m.is_public)
        return [self._hydrate(m) for m in _paginate(public, page, page_size)]

    async def count_by_owner(self, owner_id: int) -> int:
        return sum(1 for m in self._db.values() if m.owner_id == owner_id)

    async def count_public(self) -> int:
        return sum(1 for m in self._db.values() if m.is_public)

    async def add(self, map_: Map) -> Map:
        stored = map_.model_copy(update={"id": next(self._ids), "celestial_objects": []}, deep=True)
        self._db[stored.id] = stored
        return self._hydrate(stored)

    async def update(self, map_id: int, map_: Map) -> Map | None:
        if map_id not in self._db:
            return None
        stored = map_.model_copy(update={"id": map_id, "celestial_objects": []}, deep=True)
        self._db[map_id] = stored
        return self._hydrate(stored)

    async def remove(self, map_id: int) -> bool:
        if self._db.pop(map_id, None) is None:
            return False
        self.objects.detach_all(map_id)
        return True


class InMemoryUserRepo(UserGateway):
    """Dépôt utilisateurs en mémoire (email indexée par scan simple)."""

    def __init__(self):
        """Initialise une base mémoire vide."""
        self._db: dict[int, User] = {}
        self._ids = count(1)

    async def get_by_id(self, user_id: int) -> User | None:
        user = self._db.get(user_id)
        return user.model_copy() if user else None

    async def get_by_email(self, email: str) -> User | None:
        """Recherche un utilisateur par email."""
        found = next((u for u in self._db.values() if u.email == email), None)
        return found.model_copy() if found else None

    async def list_all(self, page: int, page_size: int) -> list[User]:
        ordered = [self._db[k] for k in sorted(self._db)]
        return [u.model_copy() for u in _paginate(ordered, page, page_size)]

    async def count(self) -> int:
        return len(self._db)

    def _check_email_free(self, email: str, user_id: int | None = None) -> None:
        if any(u.email == email and u.id != user_id for u in self._db.values()):
            raise DuplicateUser(f"A user with the email {email} already exists.")

    async def add(self, user: User) -> User:
        self._check_email_free(user.email)
        stored = user.model_copy(update={"id": next(self._ids)})
        self._db[stored.id] = stored
        return stored.model_copy()

    async def update(self, user_id: int, user: User) -> User | None:
        if user_id not in self._db:
            return None
        self._check_email_free(user.email, user_id)
        self._db[user_id] = user.model_copy(update={"id": user_id})
        return self._db[user_id].model_copy()

    async def remove(self, user_id: int) -> bool:
        return self._db.pop(user_id, None) is not None


class InMemorySpaceImageRepo(SpaceImageGateway):
    """Dépôt d'images spatiales en mémoire."""

    def __init__(self):
        """Initialise une base mémoire vide."""
        self._db: dict[int, SpaceImage] = {}
        self._ids = count(1)

    async def get_by_id(self, image_id: int) -> SpaceImage | None:
        image = self._db.get(image_id)
        return image.model_copy() if image else None

    async def get_by_date(self, day: date) -> SpaceImage | None:
        found = next((i for i in self._db.values() if i.shooting_date == day), None)
        return found.model_copy() if found else None

    async def list_all(self, page: int, page_size: int) -> list[SpaceImage]:
        ordered = [self._db[k] for k in sorted(self._db)]
        return [i.model_copy() for i in _paginate(ordered, page, page_size)]

    async def count(self) -> int:
        return len(self._db)

    async def add(self, image: SpaceImage) -> SpaceImage:
        existing = await self.get_by_date(image.shooting_date)
        if existing is not None:
            return existing
        stored = image.model_copy(update={"id": next(self._ids)})
        self._db[stored.id] = stored
        return stored.model_copy()
