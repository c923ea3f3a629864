"""
Taxonomie des erreurs métier.

Les services lèvent ces erreurs au moment où ils détectent la violation ; elles remontent telles
quelles jusqu'à la couche API qui les traduit en codes HTTP (voir `backend/apigw/errors.py`).
"""

from __future__ import annotations


class DomainError(Exception):
    """Erreur métier de base, porteuse d'un code stable et d'un message lisible."""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Champ invalide ; l'appelant doit corriger et renvoyer sa requête."""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class NotFound(DomainError):
    """Identifiant introuvable dans le dépôt."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: int | str) -> None:
        super().__init__(f"The {entity} n°{entity_id} was not found.")
        self.entity = entity
        self.entity_id = entity_id


class Forbidden(DomainError):
    """Utilisateur authentifié mais non autorisé (propriété ou visibilité)."""

    code = "FORBIDDEN"


class AlreadyLinked(DomainError):
    """L'objet céleste est déjà lié à une carte."""

    code = "ALREADY_LINKED"

    def __init__(self, map_id: int, object_id: int, message: str | None = None) -> None:
        super().__init__(
            message
            or f"The celestial object n°{object_id} is already in the map n°{map_id}."
        )
        self.map_id = map_id
        self.object_id = object_id


class NotLinked(DomainError):
    """L'objet céleste ne fait pas partie de la carte."""

    code = "NOT_LINKED"

    def __init__(self, map_id: int, object_id: int) -> None:
        super().__init__(f"The celestial object n°{object_id} is not in the map n°{map_id}.")
        self.map_id = map_id
        self.object_id = object_id


class StoreUnavailable(DomainError):
    """Dépôt injoignable (incident d'infrastructure transitoire)."""

    code = "SERVICE_UNAVAILABLE"

    def __init__(self, message: str = "The storage backend is temporarily unavailable.") -> None:
        super().__init__(message)


class DuplicateUser(DomainError):
    """Adresse email déjà utilisée par un autre utilisateur."""

    code = "CONFLICT"


class SpaceImageFetchError(DomainError):
    """L'API d'images spatiales a échoué ou renvoyé une image incomplète."""

    code = "BAD_GATEWAY"
