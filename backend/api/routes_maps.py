"""
Routes des cartes et du rattachement des objets célestes.

Ce module regroupe les endpoints `/v1/maps` : lecture (anonyme ou authentifiée, collection
élaguée des objets non visibles), listes paginées, création, modification, suppression et
liaison/déliaison `/v1/maps/{map_id}/celestial-objects/{object_id}`.
"""

import structlog
from fastapi import APIRouter, Depends, Query, Response

from backend.api.deps import get_current_user_id, get_map_service, get_optional_user_id
from backend.api.schemas import MapRequest, MapResponse
from backend.apigw.errors import not_found
from backend.core.http_constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    HTTP_CREATED,
    HTTP_NO_CONTENT,
    TOTAL_COUNT_HEADER,
)
from backend.domain.entities import Map
from backend.services.maps import MapService

router = APIRouter(prefix="/v1/maps", tags=["maps"])
log = structlog.get_logger(__name__)

service_dep = Depends(get_map_service)
current_user_dep = Depends(get_current_user_id)
optional_user_dep = Depends(get_optional_user_id)


@router.get("", response_model=list[MapResponse])
async def list_public_maps(
    response: Response,
    page: int = Query(DEFAULT_PAGE),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
    user_id: int | None = optional_user_dep,
    service: MapService = service_dep,
):
    """Liste paginée des cartes publiques, objets élagués selon le demandeur."""
    log.info("maps_list_public", page=page, page_size=page_size, user_id=user_id)
    maps = await service.list_public(page, page_size, requesting_user_id=user_id)
    response.headers[TOTAL_COUNT_HEADER] = str(await service.count_public())
    return [MapResponse.from_entity(m) for m in maps]


@router.get("/mine", response_model=list[MapResponse])
async def list_my_maps(
    response: Response,
    page: int = Query(DEFAULT_PAGE),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
    user_id: int = current_user_dep,
    service: MapService = service_dep,
):
    log.info("maps_list_own", user_id=user_id, page=page, page_size=page_size)
    maps = await service.list_own(user_id, page, page_size)
    response.headers[TOTAL_COUNT_HEADER] = str(await service.count_own(user_id))
    return [MapResponse.from_entity(m) for m in maps]


@router.get("/{map_id}", response_model=MapResponse)
async def get_map(
    map_id: int,
    user_id: int | None = optional_user_dep,
    service: MapService = service_dep,
):
    """Retourne une carte publique, ou privée si le demandeur en est propriétaire."""
    log.info("map_fetch", map_id=map_id, user_id=user_id)
    map_ = await service.fetch(map_id, user_id)
    if map_ is None:
        raise not_found(f"The map n°{map_id} was not found.")
    return MapResponse.from_entity(map_)


@router.post("", response_model=MapResponse, status_code=HTTP_CREATED)
async def create_map(
    payload: MapRequest,
    user_id: int = current_user_dep,
    service: MapService = service_dep,
):
    log.info("map_create", user_id=user_id)
    created = await service.create(Map(name=payload.name, is_public=payload.is_public), user_id)
    return MapResponse.from_entity(created)


@router.put("/{map_id}", response_model=MapResponse)
async def update_map(
    map_id: int,
    payload: MapRequest,
    user_id: int = current_user_dep,
    service: MapService = service_dep,
):
    """Modifie nom et visibilité d'une carte appartenant au demandeur."""
    log.info("map_update", map_id=map_id, user_id=user_id)
    updated = await service.update(
        map_id, Map(name=payload.name, is_public=payload.is_public, owner_id=user_id), user_id
    )
    return MapResponse.from_entity(updated)


@router.delete("/{map_id}", status_code=HTTP_NO_CONTENT)
async def delete_map(
    map_id: int,
    user_id: int = current_user_dep,
    service: MapService = service_dep,
):
    """Supprime une carte ; ses objets sont conservés et détachés."""
    log.info("map_delete", map_id=map_id, user_id=user_id)
    await service.delete(map_id, user_id)
    return Response(status_code=HTTP_NO_CONTENT)


@router.post("/{map_id}/celestial-objects/{object_id}", response_model=MapResponse)
async def link_celestial_object(
    map_id: int,
    object_id: int,
    user_id: int = current_user_dep,
    service: MapService = service_dep,
):
    """Ajoute un objet du demandeur à l'une de ses cartes."""
    log.info("map_link", map_id=map_id, object_id=object_id, user_id=user_id)
    map_ = await service.link_celestial_object(map_id, object_id, user_id)
    return MapResponse.from_entity(map_)


@router.delete("/{map_id}/celestial-objects/{object_id}", response_model=MapResponse)
async def unlink_celestial_object(
    map_id: int,
    object_id: int,
    user_id: int = current_user_dep,
    service: MapService = service_dep,
):
    """Retire un objet d'une carte du demandeur (la position de l'objet est effacée)."""
    log.info("map_unlink", map_id=map_id, object_id=object_id, user_id=user_id)
    map_ = await service.unlink_celestial_object(map_id, object_id, user_id)
    return MapResponse.from_entity(map_)
