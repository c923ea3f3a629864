"""
Application principale FastAPI.

Ce module assemble tous les composants de l'application : middlewares, gestionnaires d'erreurs,
routes, métriques et configuration de l'API du catalogue céleste.

Responsabilités du module:
- Initialiser le logging structuré et, si configuré, le tracing
- Construire l'application FastAPI avec son titre/debug
- Créer le schéma SQL au démarrage et libérer le moteur à l'arrêt
- Ajouter les middlewares (request id, métriques, timing)
- Monter les routers (santé, utilisateurs, jetons, objets, cartes, images, métriques)
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.api.routes_celestial_objects import router as celestial_objects_router
from backend.api.routes_health import router as health_router
from backend.api.routes_maps import router as maps_router
from backend.api.routes_space_images import router as space_images_router
from backend.api.routes_tokens import router as tokens_router
from backend.api.routes_users import router as users_router
from backend.apigw.errors import register_error_handlers
from backend.app.metrics import PrometheusMiddleware, metrics_router
from backend.app.tracing import setup_tracing
from backend.core.container import container
from backend.core.logging import setup_logging
from backend.middlewares.request_id import RequestIDMiddleware
from backend.middlewares.timing import TimingMiddleware


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    await container.startup()
    yield
    await container.shutdown()


def create_app() -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Configure le logging structuré (structlog) et le tracing OTLP optionnel
    - Lit les paramètres d'exécution
    - Ajoute les middlewares utiles au debug/traçabilité
    - Branche les gestionnaires d'erreurs et publie les routes
    """
    settings = container.settings
    setup_logging(debug=settings.APP_DEBUG, json=settings.APP_ENV not in ("dev", "test"))
    setup_tracing(settings)
    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG, lifespan=lifespan)
    # le dernier ajouté est le plus externe : RequestID doit envelopper les autres
    app.add_middleware(TimingMiddleware)
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(tokens_router)
    app.include_router(celestial_objects_router)
    app.include_router(maps_router)
    app.include_router(space_images_router)
    app.include_router(metrics_router)
    return app


app = create_app()
