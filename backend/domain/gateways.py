"""
Interfaces des dépôts (gateways) consommées par les services métier.

Ce module définit les contrats abstraits de persistance : objets célestes, cartes, utilisateurs,
images spatiales, ainsi que le client de récupération de l'image du jour. Deux familles
d'implémentations existent : en mémoire (`backend/infra/repositories.py`) et SQLAlchemy
asynchrone (`backend/infra/repo/`).

Conventions communes:
- `get_*` renvoie None quand l'identifiant est absent.
- `update`/`set_map_id` renvoient None quand l'identifiant est absent.
- `remove` renvoie False quand l'identifiant est absent.
- Les listes sont triées par id croissant et paginées (`page` commence à 1).
- Un dépôt injoignable lève `StoreUnavailable`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime

from backend.domain.entities import CelestialObject, Map, SpaceImage, User


class CelestialObjectGateway(ABC):
    """Contrat de persistance des objets célestes."""

    @abstractmethod
    async def get_by_id(self, object_id: int) -> CelestialObject | None:
        """Retourne l'objet `object_id`, ou None s'il est absent."""
        ...

    @abstractmethod
    async def list_by_owner(self, owner_id: int, page: int, page_size: int) -> list[CelestialObject]:
        """Page des objets appartenant à `owner_id`."""
        ...

    @abstractmethod
    async def list_public(self, page: int, page_size: int) -> list[CelestialObject]:
        """Page des objets publics."""
        ...

    @abstractmethod
    async def count_by_owner(self, owner_id: int) -> int: ...

    @abstractmethod
    async def count_public(self) -> int: ...

    @abstractmethod
    async def add(self, obj: CelestialObject) -> CelestialObject:
        """Insère l'objet et le renvoie avec son identifiant attribué."""
        ...

    @abstractmethod
    async def update(self, object_id: int, obj: CelestialObject) -> CelestialObject | None:
        """Remplace les champs de l'objet `object_id` (rattachement à une carte inclus)."""
        ...

    @abstractmethod
    async def remove(self, object_id: int) -> bool: ...

    @abstractmethod
    async def set_map_id(
        self, object_id: int, map_id: int | None, modification_date: datetime
    ) -> CelestialObject | None:
        """Rattache l'objet à `map_id` ; `None` le détache et efface sa position."""
        ...


class MapGateway(ABC):
    """Contrat de persistance des cartes.

    Les cartes renvoyées portent leur collection d'objets, dérivée des rattachements.
    """

    @abstractmethod
    async def get_by_id(self, map_id: int) -> Map | None: ...

    @abstractmethod
    async def list_by_owner(self, owner_id: int, page: int, page_size: int) -> list[Map]: ...

    @abstractmethod
    async def list_public(self, page: int, page_size: int) -> list[Map]: ...

    @abstractmethod
    async def count_by_owner(self, owner_id: int) -> int: ...

    @abstractmethod
    async def count_public(self) -> int: ...

    @abstractmethod
    async def add(self, map_: Map) -> Map: ...

    @abstractmethod
    async def update(self, map_id: int, map_: Map) -> Map | None:
        """Remplace nom, visibilité et dates ; la collection d'objets n'est pas touchée."""
        ...

    @abstractmethod
    async def remove(self, map_id: int) -> bool:
        """Supprime la carte et détache les objets qu'elle contenait."""
        ...


class UserGateway(ABC):
    """Contrat de persistance des utilisateurs."""

    @abstractmethod
    async def get_by_id(self, user_id: int) -> User | None: ...

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None: ...

    @abstractmethod
    async def list_all(self, page: int, page_size: int) -> list[User]: ...

    @abstractmethod
    async def count(self) -> int: ...

    @abstractmethod
    async def add(self, user: User) -> User:
        """Persiste l'utilisateur ; lève `DuplicateUser` si l'email est déjà pris."""
        ...

    @abstractmethod
    async def update(self, user_id: int, user: User) -> User | None:
        """Remplace l'utilisateur ; lève `DuplicateUser` si l'email appartient à un autre."""
        ...

    @abstractmethod
    async def remove(self, user_id: int) -> bool: ...


class SpaceImageGateway(ABC):
    """Contrat de persistance des images spatiales (une par date de prise de vue)."""

    @abstractmethod
    async def get_by_id(self, image_id: int) -> SpaceImage | None: ...

    @abstractmethod
    async def get_by_date(self, day: date) -> SpaceImage | None: ...

    @abstractmethod
    async def list_all(self, page: int, page_size: int) -> list[SpaceImage]: ...

    @abstractmethod
    async def count(self) -> int: ...

    @abstractmethod
    async def add(self, image: SpaceImage) -> SpaceImage:
        """Persiste l'image ; si une image existe déjà pour cette date, la retourne."""
        ...


class SpaceImageFetcher(ABC):
    """Client de l'API externe fournissant l'image spatiale du jour."""

    @abstractmethod
    async def fetch_image_of_the_day(self) -> SpaceImage:
        """Récupère l'image du jour ; lève `SpaceImageFetchError` en cas d'échec."""
        ...
