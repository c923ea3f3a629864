"""Middleware Starlette de mesure et de journalisation des requêtes.

Ajoute la durée de traitement (ms) en en-tête de réponse et émet un événement `http_request`
par requête ; au-delà de `slow_ms`, l'événement passe en niveau warning.
"""

import time
from collections.abc import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

log = structlog.get_logger(__name__)

SLOW_REQUEST_MS = 1000


class TimingMiddleware(BaseHTTPMiddleware):
    """Middleware de temps de traitement (`X-Process-Time-ms` par défaut)."""

    def __init__(
        self,
        app: ASGIApp,
        header_name: str = "X-Process-Time-ms",
        slow_ms: int = SLOW_REQUEST_MS,
    ) -> None:
        """Initialise le middleware.

        Args:
            app: Application ASGI à wrapper.
            header_name: Nom de l'en-tête HTTP pour le temps de traitement.
            slow_ms: Seuil (ms) à partir duquel une requête est signalée comme lente.
        """
        super().__init__(app)
        self.header_name = header_name
        self.slow_ms = slow_ms

    async def dispatch(self, request, call_next: Callable):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)
        response.headers[self.header_name] = str(duration_ms)
        emit = log.warning if duration_ms >= self.slow_ms else log.info
        emit(
            "http_request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=duration_ms,
        )
        return response
