"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, dépôts, client d'images spatiales) et expose un
singleton `container` utilisé par le reste de l'application. Sans `DATABASE_URL`, les dépôts
sont en mémoire ; sinon ils sont adossés à SQLAlchemy (async).
"""

from __future__ import annotations

import structlog

from backend.core.settings import Settings, get_settings
from backend.domain.gateways import SpaceImageFetcher
from backend.infra.http_clients import ApodClient
from backend.infra.repo.celestial_object_repo import SqlCelestialObjectRepo
from backend.infra.repo.db import get_engine, get_session_factory, init_db
from backend.infra.repo.map_repo import SqlMapRepo
from backend.infra.repo.space_image_repo import SqlSpaceImageRepo
from backend.infra.repo.user_repo import SqlUserRepo
from backend.infra.repositories import (
    InMemoryCelestialObjectRepo,
    InMemoryMapRepo,
    InMemorySpaceImageRepo,
    InMemoryUserRepo,
)

log = structlog.get_logger(__name__)


class Container:
    """Assemble les gateways selon la configuration.

    Attributs publics: `settings`, `storage_backend` ("memory" | "sql"), `celestial_object_repo`,
    `map_repo`, `user_repo`, `space_image_repo`, `space_image_fetcher`.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        space_image_fetcher: SpaceImageFetcher | None = None,
    ):
        self.settings = settings or get_settings()
        self.engine = None
        if self.settings.DATABASE_URL:
            self.engine = get_engine(self.settings.DATABASE_URL, echo=self.settings.DATABASE_ECHO)
            sessions = get_session_factory(self.engine)
            self.celestial_object_repo = SqlCelestialObjectRepo(sessions)
            self.map_repo = SqlMapRepo(sessions)
            self.user_repo = SqlUserRepo(sessions)
            self.space_image_repo = SqlSpaceImageRepo(sessions)
            self.storage_backend = "sql"
        else:
            self.celestial_object_repo = InMemoryCelestialObjectRepo()
            self.map_repo = InMemoryMapRepo(self.celestial_object_repo)
            self.user_repo = InMemoryUserRepo()
            self.space_image_repo = InMemorySpaceImageRepo()
            self.storage_backend = "memory"

        self.space_image_fetcher = space_image_fetcher or ApodClient(
            url=self.settings.APOD_URL,
            api_key=self.settings.APOD_API_KEY,
            timeout_s=self.settings.APOD_TIMEOUT_S,
        )

    async def startup(self) -> None:
        """Crée le schéma SQL au démarrage (sans effet en mémoire)."""
        if self.engine is not None:
            await init_db(self.engine)
        log.info("container_started", storage=self.storage_backend)

    async def shutdown(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()


container = Container()
