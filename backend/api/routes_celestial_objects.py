"""
Routes des objets célestes (étoiles et planètes).

Ce module regroupe les endpoints `/v1/celestial-objects` : lecture (anonyme ou authentifiée),
listes paginées publiques et personnelles, création, modification et suppression. Les erreurs
métier sont traduites par les gestionnaires de `backend/apigw/errors.py`.
"""

import structlog
from fastapi import APIRouter, Depends, Query, Response

from backend.api.deps import (
    get_celestial_object_service,
    get_current_user_id,
    get_optional_user_id,
)
from backend.api.schemas import CelestialObjectRequest, CelestialObjectResponse
from backend.apigw.errors import not_found
from backend.core.http_constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    HTTP_CREATED,
    HTTP_NO_CONTENT,
    TOTAL_COUNT_HEADER,
)
from backend.services.celestial_objects import CelestialObjectService

router = APIRouter(prefix="/v1/celestial-objects", tags=["celestial-objects"])
log = structlog.get_logger(__name__)

service_dep = Depends(get_celestial_object_service)
current_user_dep = Depends(get_current_user_id)
optional_user_dep = Depends(get_optional_user_id)


@router.get("", response_model=list[CelestialObjectResponse])
async def list_public_celestial_objects(
    response: Response,
    page: int = Query(DEFAULT_PAGE),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
    service: CelestialObjectService = service_dep,
):
    """Liste paginée des objets publics ; le total est renvoyé dans `X-Total-Count`."""
    log.info("celestial_objects_list_public", page=page, page_size=page_size)
    objects = await service.list_public(page, page_size)
    response.headers[TOTAL_COUNT_HEADER] = str(await service.count_public())
    return [CelestialObjectResponse.from_entity(o) for o in objects]


@router.get("/mine", response_model=list[CelestialObjectResponse])
async def list_my_celestial_objects(
    response: Response,
    page: int = Query(DEFAULT_PAGE),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
    user_id: int = current_user_dep,
    service: CelestialObjectService = service_dep,
):
    """Liste paginée des objets de l'utilisateur authentifié."""
    log.info("celestial_objects_list_own", user_id=user_id, page=page, page_size=page_size)
    objects = await service.list_own(user_id, page, page_size)
    response.headers[TOTAL_COUNT_HEADER] = str(await service.count_own(user_id))
    return [CelestialObjectResponse.from_entity(o) for o in objects]


@router.get("/{object_id}", response_model=CelestialObjectResponse)
async def get_celestial_object(
    object_id: int,
    user_id: int | None = optional_user_dep,
    service: CelestialObjectService = service_dep,
):
    """Retourne un objet public, ou privé si le demandeur en est propriétaire."""
    log.info("celestial_object_fetch", object_id=object_id, user_id=user_id)
    obj = await service.fetch(object_id, user_id)
    if obj is None:
        raise not_found(f"The celestial object n°{object_id} was not found.")
    return CelestialObjectResponse.from_entity(obj)


@router.post("", response_model=CelestialObjectResponse, status_code=HTTP_CREATED)
async def create_celestial_object(
    payload: CelestialObjectRequest,
    user_id: int = current_user_dep,
    service: CelestialObjectService = service_dep,
):
    """Crée un objet appartenant à l'utilisateur authentifié (créé hors de toute carte)."""
    log.info("celestial_object_create", user_id=user_id, kind=payload.type)
    created = await service.create(payload.to_entity(), user_id)
    return CelestialObjectResponse.from_entity(created)


@router.put("/{object_id}", response_model=CelestialObjectResponse)
async def update_celestial_object(
    object_id: int,
    payload: CelestialObjectRequest,
    user_id: int = current_user_dep,
    service: CelestialObjectService = service_dep,
):
    """Modifie un objet existant ; propriétaire, dates de création et carte sont conservés."""
    log.info("celestial_object_update", object_id=object_id, user_id=user_id)
    updated = await service.update(object_id, payload.to_entity(), user_id)
    return CelestialObjectResponse.from_entity(updated)


@router.delete("/{object_id}", status_code=HTTP_NO_CONTENT)
async def delete_celestial_object(
    object_id: int,
    user_id: int = current_user_dep,
    service: CelestialObjectService = service_dep,
):
    """Supprime définitivement un objet appartenant au demandeur."""
    log.info("celestial_object_delete", object_id=object_id, user_id=user_id)
    await service.delete(object_id, user_id)
    return Response(status_code=HTTP_NO_CONTENT)
