"""
Entités du domaine métier.

Ce module définit les modèles de données du catalogue céleste : objets célestes (variante fermée
étoile/planète discriminée par `kind`), cartes, utilisateurs et images spatiales.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator


def title_case(value: str) -> str:
    """Met en capitale la première lettre de chaque mot, sans toucher aux sigles (ex: NGC)."""
    return " ".join(
        word if word.isupper() else word[:1].upper() + word[1:].lower()
        for word in value.split(" ")
    )


class StarType(str, Enum):
    """Classification d'une étoile."""

    MAIN_SEQUENCE = "MainSequence"
    RED_GIANT = "RedGiant"
    RED_SUPER_GIANT = "RedSuperGiant"
    WHITE_DWARF = "WhiteDwarf"
    RED_DWARF = "RedDwarf"
    BLUE_GIANT = "BlueGiant"
    YELLOW_DWARF = "YellowDwarf"
    NEUTRON_STAR = "NeutronStar"
    BLACK_HOLE = "BlackHole"
    UNDEFINED = "Undefined"


class PlanetType(str, Enum):
    """Classification d'une planète."""

    TERRESTRIAL = "Terrestrial"
    GAS = "Gas"


class Role(str, Enum):
    """Rôle d'un utilisateur."""

    MEMBER = "Member"
    ADMINISTRATOR = "Administrator"


class Position(BaseModel):
    """Coordonnées entières d'un objet dans une carte."""

    x: int
    y: int
    z: int


class _CelestialObjectBase(BaseModel):
    """Champs communs à toutes les variantes d'objet céleste.

    `map_id` vaut None tant que l'objet n'est lié à aucune carte.
    """

    id: int | None = None
    name: str
    description: str
    image: str = ""
    position: Position | None = None
    mass: float
    temperature: float
    radius: float
    creation_date: datetime | None = None
    modification_date: datetime | None = None
    owner_id: int | None = None
    is_public: bool = False
    map_id: int | None = None

    @field_validator("name")
    @classmethod
    def _title_name(cls, value: str) -> str:
        return title_case(value)


class Star(_CelestialObjectBase):
    """Étoile : ajoute la luminosité et le type d'étoile."""

    kind: Literal["star"] = "star"
    brightness: float
    star_type: StarType = StarType.UNDEFINED


class Planet(_CelestialObjectBase):
    """Planète : ajoute présence d'eau, de vie et le type de planète."""

    kind: Literal["planet"] = "planet"
    is_water: bool = False
    is_life: bool = False
    planet_type: PlanetType


CelestialObject = Annotated[Star | Planet, Field(discriminator="kind")]


class Map(BaseModel):
    """Carte regroupant des objets célestes.

    `celestial_objects` est dérivée des objets dont `map_id` désigne cette carte ; elle n'est
    jamais modifiée directement pour lier ou délier un objet.
    """

    id: int | None = None
    name: str
    owner_id: int | None = None
    is_public: bool = False
    creation_date: datetime | None = None
    modification_date: datetime | None = None
    celestial_objects: list[CelestialObject] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _title_name(cls, value: str) -> str:
        return title_case(value)

    def contains(self, object_id: int) -> bool:
        """Indique si l'objet `object_id` fait partie de la carte."""
        return any(o.id == object_id for o in self.celestial_objects)


class User(BaseModel):
    """Utilisateur : identité, rôle et état du jeton de rafraîchissement."""

    id: int | None = None
    email: str
    username: str
    password: str
    role: Role = Role.MEMBER
    refresh_token: str | None = None
    refresh_token_expiry_time: datetime | None = None
    creation_date: datetime | None = None
    modification_date: datetime | None = None


class SpaceImage(BaseModel):
    """Image spatiale du jour."""

    id: int | None = None
    title: str
    description: str
    image: str
    shooting_date: date
