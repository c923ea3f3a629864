"""Validation structurelle des champs avant toute écriture.

Fonctions pures : elles ne renvoient rien en cas de succès et lèvent `ValidationError`
(nom du champ + raison) à la première règle violée. Les bornes sont exactes.
"""

from __future__ import annotations

from email_validator import EmailNotValidError, validate_email

from backend.domain.entities import CelestialObject, Map, User
from backend.domain.errors import ValidationError

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 1000
MIN_TEMPERATURE = -273
MAX_EMAIL_LENGTH = 100
MAX_USERNAME_LENGTH = 30
MAX_PAGE_SIZE = 100


def _require_text(field: str, value: str | None, max_length: int) -> None:
    if value is None or not value.strip():
        raise ValidationError(field, "cannot be null or empty")
    if len(value) > max_length:
        raise ValidationError(field, f"cannot be longer than {max_length} characters")


def validate_celestial_object(obj: CelestialObject) -> None:
    """Vérifie les champs communs puis ceux propres à la variante (`kind`)."""
    _require_text("name", obj.name, MAX_NAME_LENGTH)
    _require_text("description", obj.description, MAX_DESCRIPTION_LENGTH)
    # `not x > 0` rejette aussi NaN
    if not obj.mass > 0:
        raise ValidationError("mass", "must be greater than 0")
    if not obj.radius > 0:
        raise ValidationError("radius", "must be greater than 0")
    if not obj.temperature >= MIN_TEMPERATURE:
        raise ValidationError("temperature", f"cannot be lower than {MIN_TEMPERATURE}")
    if obj.position is not None and obj.map_id is None:
        raise ValidationError("position", "cannot be set without a map")

    if obj.kind == "star":
        if not obj.brightness > 0:
            raise ValidationError("brightness", "must be greater than 0")
    elif obj.kind == "planet":
        pass
    else:
        raise ValidationError("kind", f"unknown celestial object type {obj.kind!r}")


def validate_map(map_: Map) -> None:
    _require_text("name", map_.name, MAX_NAME_LENGTH)


def validate_user(user: User) -> None:
    """Vérifie email (présence, format, longueur), nom d'utilisateur et mot de passe."""
    if user.email is None or not user.email.strip():
        raise ValidationError("email", "cannot be null or empty")
    try:
        validate_email(user.email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError("email", "has not a valid format") from exc
    if len(user.email) > MAX_EMAIL_LENGTH:
        raise ValidationError("email", f"cannot be longer than {MAX_EMAIL_LENGTH} characters")
    _require_text("username", user.username, MAX_USERNAME_LENGTH)
    if user.password is None or not user.password.strip():
        raise ValidationError("password", "cannot be null or empty")


def validate_pagination(page: int, page_size: int, max_page_size: int = MAX_PAGE_SIZE) -> None:
    if page < 1:
        raise ValidationError("page", "must be greater than 0")
    if page_size < 1:
        raise ValidationError("page_size", "must be greater than 0")
    if page_size > max_page_size:
        raise ValidationError("page_size", f"cannot be greater than {max_page_size}")
