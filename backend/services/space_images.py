# ============================================================
# Module : backend/services/space_images.py
# Objet  : Lecture des images spatiales et cache de l'image du jour.
# Contexte : Lecture d'abord dans le dépôt ; en cas d'absence pour aujourd'hui, appel
#            de l'API externe puis stockage (cache-aside, sans expiration).
# ============================================================

from __future__ import annotations

from datetime import date

import structlog

from backend.domain.entities import SpaceImage
from backend.domain.errors import SpaceImageFetchError
from backend.domain.gateways import SpaceImageFetcher, SpaceImageGateway
from backend.domain.validation import validate_pagination
from backend.services.celestial_objects import Clock, utc_now

_REQUIRED_FIELDS = ("title", "description", "image")


class SpaceImageService:
    """Service des images spatiales.

    Paramètres:
    - images: gateway de persistance des images.
    - fetcher: client de l'API fournissant l'image du jour.
    - clock: source de l'horodatage, dont la date détermine « aujourd'hui ».
    """

    def __init__(
        self, images: SpaceImageGateway, fetcher: SpaceImageFetcher, clock: Clock = utc_now
    ) -> None:
        self.images = images
        self.fetcher = fetcher
        self._clock = clock
        self._log = structlog.get_logger(__name__).bind(component="space_image_service")

    async def get(self, image_id: int) -> SpaceImage | None:
        return await self.images.get_by_id(image_id)

    async def list(self, page: int, page_size: int) -> list[SpaceImage]:
        validate_pagination(page, page_size)
        return await self.images.list_all(page, page_size)

    async def count(self) -> int:
        return await self.images.count()

    async def get_by_date(self, day: date | None = None) -> SpaceImage | None:
        """Image d'une date donnée ; None ou aujourd'hui déclenche l'image du jour."""
        today = self._clock().date()
        if day is None or day == today:
            return await self._image_of_the_day(today)
        return await self.images.get_by_date(day)

    async def _image_of_the_day(self, today: date) -> SpaceImage:
        cached = await self.images.get_by_date(today)
        if cached is not None:
            return cached

        self._log.info("space_image_fetch", day=today.isoformat())
        image = await self.fetcher.fetch_image_of_the_day()
        for field in _REQUIRED_FIELDS:
            if not (getattr(image, field) or "").strip():
                self._log.error("space_image_incomplete", field=field)
                raise SpaceImageFetchError(
                    f"The image of the day has no {field}; it cannot be stored."
                )
        return await self.images.add(image.model_copy(update={"id": None, "shooting_date": today}))
