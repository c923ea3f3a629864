"""Dépendances partagées pour les routes de l'API.

But du module
-------------
- Centraliser la création des services exposés aux endpoints à partir du conteneur.
- Résoudre l'utilisateur courant à partir du jeton `Authorization: Bearer ...`.

Les tests remplacent `get_container` via `app.dependency_overrides` pour disposer d'un conteneur
en mémoire neuf.
"""

from fastapi import Depends, Header

from backend.apigw.errors import forbidden, unauthorized
from backend.core import container as container_module
from backend.core.container import Container
from backend.domain.auth import TokenData, decode_token
from backend.domain.entities import Role, User
from backend.services.celestial_objects import CelestialObjectService
from backend.services.maps import MapService
from backend.services.space_images import SpaceImageService
from backend.services.users import UserService


def get_container() -> Container:
    """Conteneur applicatif courant."""
    return container_module.container


container_dep = Depends(get_container)


def get_celestial_object_service(c: Container = container_dep) -> CelestialObjectService:
    return CelestialObjectService(c.celestial_object_repo)


def get_map_service(c: Container = container_dep) -> MapService:
    return MapService(c.map_repo, CelestialObjectService(c.celestial_object_repo))


def get_user_service(c: Container = container_dep) -> UserService:
    return UserService(c.user_repo)


def get_space_image_service(c: Container = container_dep) -> SpaceImageService:
    return SpaceImageService(c.space_image_repo, c.space_image_fetcher)


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None


def _decode(token: str, c: Container) -> TokenData:
    data = decode_token(token, c.settings.JWT_SECRET, c.settings.JWT_ALG)
    if data is None or data.user_id is None:
        raise unauthorized("invalid_token")
    return data


def get_token_data(
    authorization: str | None = Header(None), c: Container = container_dep
) -> TokenData:
    """Extrait et valide les revendications du jeton d'accès (401 sinon)."""
    token = _bearer_token(authorization)
    if token is None:
        raise unauthorized("missing_token")
    return _decode(token, c)


def get_current_user_id(data: TokenData = Depends(get_token_data)) -> int:
    """Identifiant de l'utilisateur authentifié."""
    return data.user_id


def get_optional_user_id(
    authorization: str | None = Header(None), c: Container = container_dep
) -> int | None:
    """Identifiant de l'utilisateur si un jeton est fourni, None pour un appel anonyme.

    Un jeton présent mais invalide reste refusé (401).
    """
    token = _bearer_token(authorization)
    if token is None:
        return None
    return _decode(token, c).user_id


async def get_current_user(
    user_id: int = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
) -> User:
    """Utilisateur authentifié, relu dans le dépôt (401 s'il a été supprimé)."""
    user = await users.get_by_id(user_id)
    if user is None:
        raise unauthorized("user_not_found")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Refuse (403) un utilisateur qui n'est pas administrateur."""
    if user.role != Role.ADMINISTRATOR:
        raise forbidden("administrator_required")
    return user
