"""Clients HTTP externes.

Objectif du module
------------------
- Encapsuler les appels réseau vers des services tiers ; ici l'API « Astronomy Picture of the
  Day » de la NASA qui fournit l'image spatiale du jour.
"""

from __future__ import annotations

from datetime import date

import httpx
import structlog
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from backend.domain.entities import SpaceImage
from backend.domain.errors import SpaceImageFetchError
from backend.domain.gateways import SpaceImageFetcher

log = structlog.get_logger(__name__)


class ApodResponse(BaseModel):
    """Réponse JSON de l'API APOD (champs utiles uniquement)."""

    title: str | None = None
    explanation: str | None = None
    url: str | None = None
    hdurl: str | None = None
    shooting_date: date | None = Field(default=None, alias="date")


class ApodClient(SpaceImageFetcher):
    """Client asynchrone de l'API APOD.

    Paramètres:
    - url: endpoint APOD.
    - api_key: clé API (`DEMO_KEY` accepté par la NASA avec quotas réduits).
    - timeout_s: délai maximal d'un appel.
    - transport: transport httpx injectable (tests).
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout = httpx.Timeout(timeout_s)
        self._transport = transport

    async def fetch_image_of_the_day(self) -> SpaceImage:
        """Appelle l'API puis convertit la réponse ; l'URL haute définition est préférée."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(self.url, params={"api_key": self.api_key})
                resp.raise_for_status()
                payload = ApodResponse.model_validate(resp.json())
        except httpx.HTTPError as exc:
            log.error("apod_fetch_failed", url=self.url, error=str(exc))
            raise SpaceImageFetchError(
                "An error occurred while fetching the space image of the day from the API."
            ) from exc
        except (ValueError, PydanticValidationError) as exc:
            log.error("apod_response_invalid", url=self.url, error=str(exc))
            raise SpaceImageFetchError(
                "An error occurred while deserializing the space image response."
            ) from exc

        return SpaceImage(
            title=payload.title or "",
            description=payload.explanation or "",
            image=payload.hdurl or payload.url or "",
            shooting_date=payload.shooting_date or date.today(),
        )
