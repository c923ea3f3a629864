"""Configuration du tracing OpenTelemetry pour l'observabilité.

Ce module configure le tracing distribué avec OpenTelemetry pour exporter les traces vers un
endpoint OTLP configuré via les variables d'environnement.
"""

from __future__ import annotations

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from backend.core.settings import Settings


def setup_tracing(settings: Settings) -> bool:
    """Installe le provider de traces si `OTLP_ENDPOINT` est configuré.

    Retour: True si le tracing a été activé.
    """
    if not settings.OTLP_ENDPOINT:
        return False

    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: settings.APP_NAME}))
    processor = BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.OTLP_ENDPOINT, insecure=True))
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)
    return True
