"""
Routes des images spatiales.

Ce module expose `/v1/space-images` : lecture par identifiant, liste paginée et lecture par
date (`/date` seul renvoie l'image du jour, récupérée auprès de l'API externe au premier appel).
"""

from datetime import date

import structlog
from fastapi import APIRouter, Depends, Query, Response

from backend.api.deps import get_space_image_service
from backend.api.schemas import SpaceImageResponse
from backend.apigw.errors import not_found
from backend.core.http_constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, TOTAL_COUNT_HEADER
from backend.services.space_images import SpaceImageService

router = APIRouter(prefix="/v1/space-images", tags=["space-images"])
log = structlog.get_logger(__name__)

service_dep = Depends(get_space_image_service)


@router.get("", response_model=list[SpaceImageResponse])
async def list_space_images(
    response: Response,
    page: int = Query(DEFAULT_PAGE),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
    service: SpaceImageService = service_dep,
):
    images = await service.list(page, page_size)
    response.headers[TOTAL_COUNT_HEADER] = str(await service.count())
    return [SpaceImageResponse.from_entity(i) for i in images]


@router.get("/date", response_model=SpaceImageResponse)
async def get_space_image_of_the_day(service: SpaceImageService = service_dep):
    """Image du jour (lue en base, sinon récupérée puis stockée)."""
    log.info("space_image_of_the_day")
    image = await service.get_by_date(None)
    return SpaceImageResponse.from_entity(image)


@router.get("/date/{day}", response_model=SpaceImageResponse)
async def get_space_image_by_date(day: date, service: SpaceImageService = service_dep):
    """Image d'une date donnée (AAAA-MM-JJ) ; une date passée n'interroge que la base."""
    image = await service.get_by_date(day)
    if image is None:
        raise not_found(f"No space image was found for {day.isoformat()}.")
    return SpaceImageResponse.from_entity(image)


@router.get("/{image_id}", response_model=SpaceImageResponse)
async def get_space_image(image_id: int, service: SpaceImageService = service_dep):
    image = await service.get(image_id)
    if image is None:
        raise not_found(f"The space image n°{image_id} was not found.")
    return SpaceImageResponse.from_entity(image)
