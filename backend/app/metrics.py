"""
Métriques Prometheus pour l'application.

Ce module définit les métriques HTTP (comptage, latence par gabarit de route) et les compteurs
métier du catalogue (refus d'autorisation, opérations de rattachement carte/objet), et expose
`/metrics`.
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.routing import Match

metrics_router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

# Business metrics
AUTHZ_DENIALS = Counter(
    "authorization_denials_total",
    "Requests refused by ownership or visibility rules",
    ["entity", "operation"],
)
MAP_LINK_OPERATIONS = Counter(
    "map_link_operations_total",
    "Link/unlink operations between maps and celestial objects",
    ["operation", "result"],
)
DOMAIN_ERRORS = Counter(
    "domain_errors_total",
    "Domain errors translated to HTTP responses",
    ["code"],
)


@metrics_router.get("/metrics")
def metrics():
    """
    Expose les métriques Prometheus au format texte.

    Returns:
        Response: Réponse HTTP contenant les métriques au format Prometheus.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def route_template(request: Request) -> str:
    """Gabarit de la route correspondant à la requête (ex: `/v1/maps/{map_id}`).

    Le gabarit borne la cardinalité du label `route` ; une requête sans route connue est
    étiquetée `unmatched`.
    """
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", "unknown")
    return "unmatched"


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware Prometheus pour mesurer les métriques HTTP.

    Collecte les métriques de comptage des requêtes et de latence par route pour l'exposition
    Prometheus.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        route = route_template(request)
        REQUEST_COUNT.labels(request.method, route, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(route).observe(time.perf_counter() - start)
        return response
