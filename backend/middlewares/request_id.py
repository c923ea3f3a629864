"""Middleware Starlette pour attribuer et propager un identifiant de requête.

L'identifiant (en-tête entrant ou UUID généré) est exposé dans `request.state.request_id`, lié
au contexte structlog le temps de la requête et renvoyé dans l'en-tête de réponse. Les
enveloppes d'erreur le reprennent comme `trace_id`.
"""

from collections.abc import Callable
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware d'identifiant de requête (`X-Request-ID` par défaut)."""

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID") -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request, call_next: Callable):
        request_id = request.headers.get(self.header_name) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
        response.headers[self.header_name] = request_id
        return response
