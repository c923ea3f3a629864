"""
Endpoint de santé pour vérifier la disponibilité de l'API et du stockage.

Expose `/health` pour signaler l'état général de l'application et le type de dépôt utilisé.
"""

from fastapi import APIRouter, Depends

from backend.api.deps import get_container
from backend.core.container import Container

router = APIRouter(tags=["health"])


@router.get("/health")
def health(c: Container = Depends(get_container)):
    """Vérifie la disponibilité de l'API et le backend de stockage."""
    return {
        "status": "ok",
        "storage": c.storage_backend,
        "database_url": bool(c.settings.DATABASE_URL),
    }
