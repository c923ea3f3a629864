"""Configuration de logging basée sur structlog.

Objectif du module
------------------
- Logs structurés lisibles en développement (console), JSON ailleurs.
- Contexte de requête (ex: `request_id`) fusionné dans chaque événement.
"""

import logging
import sys

import structlog


def setup_logging(debug: bool = True, json: bool = False) -> None:
    """Configure structlog et le logging standard.

    Paramètres:
    - debug: niveau DEBUG si vrai, INFO sinon.
    - json: rendu JSON (production) au lieu du rendu console.
    """
    level = logging.DEBUG if debug else logging.INFO
    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )
    # apigw.errors journalise via le module logging standard
    logging.basicConfig(level=level, stream=sys.stdout, format="%(levelname)s %(name)s %(message)s")
