"""Configuration de test pour pytest avec gestion des chemins.

Ce module ajoute la racine du projet au sys.path et fournit un conteneur en mémoire neuf par
test, branché sur l'application via `app.dependency_overrides`.
"""

import os
import sys

import pytest

# Ensure project root is on sys.path so that
# imports like `from backend...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from fastapi.testclient import TestClient  # noqa: E402

from backend.api.deps import get_container  # noqa: E402
from backend.app.main import app  # noqa: E402
from backend.core.container import Container  # noqa: E402
from backend.core.settings import Settings  # noqa: E402
from tests.fakes import FakeSpaceImageFetcher  # noqa: E402


@pytest.fixture
def fetcher() -> FakeSpaceImageFetcher:
    """Client d'images spatiales factice (aucun appel réseau)."""
    return FakeSpaceImageFetcher()


@pytest.fixture
def container(fetcher: FakeSpaceImageFetcher) -> Container:
    """Conteneur en mémoire isolé."""
    settings = Settings(_env_file=None, DATABASE_URL=None, JWT_SECRET="test-secret")
    return Container(settings=settings, space_image_fetcher=fetcher)


@pytest.fixture
def client(container: Container):
    """Client HTTP de test utilisant le conteneur isolé."""
    app.dependency_overrides[get_container] = lambda: container
    yield TestClient(app)
    app.dependency_overrides.clear()
