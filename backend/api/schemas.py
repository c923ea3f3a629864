# Schémas Pydantic exposés par l'API (requêtes et réponses).

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, EmailStr

from backend.domain.entities import (
    CelestialObject,
    Map,
    Planet,
    PlanetType,
    Position,
    Role,
    SpaceImage,
    Star,
    StarType,
    User,
)
from backend.domain.errors import ValidationError


class CelestialObjectRequest(BaseModel):
    """Modèle de requête pour créer ou modifier un objet céleste.

    Champs:
    - type: "star" | "planet" (détermine les champs propres à la variante)
    - name, description, image: textes (image = référence, peut être vide)
    - position: coordonnées ; ignorée à la création, acceptée en modification si l'objet est rattaché
    - mass, temperature, radius: grandeurs physiques
    - is_public: visibilité
    - map_id: carte visée (l'objet est lié via `/v1/maps/{id}/celestial-objects/{object_id}`)
    - brightness, star_type: étoile
    - is_water, is_life, planet_type: planète
    """

    type: Literal["star", "planet"]
    name: str
    description: str
    image: str = ""
    position: Position | None = None
    mass: float
    temperature: float
    radius: float
    is_public: bool = False
    map_id: int | None = None
    brightness: float | None = None
    star_type: StarType | None = None
    is_water: bool | None = None
    is_life: bool | None = None
    planet_type: PlanetType | None = None

    def to_entity(self) -> CelestialObject:
        """Construit la variante du domaine ; lève `ValidationError` si un champ requis manque."""
        common = self.model_dump(
            include={
                "name",
                "description",
                "image",
                "position",
                "mass",
                "temperature",
                "radius",
                "is_public",
                "map_id",
            }
        )
        if self.type == "star":
            if self.brightness is None:
                raise ValidationError("brightness", "is required for a star")
            return Star(
                **common,
                brightness=self.brightness,
                star_type=self.star_type or StarType.UNDEFINED,
            )
        if self.planet_type is None:
            raise ValidationError("planet_type", "is required for a planet")
        return Planet(
            **common,
            is_water=bool(self.is_water),
            is_life=bool(self.is_life),
            planet_type=self.planet_type,
        )


class CelestialObjectResponse(BaseModel):
    """Vue publique d'un objet céleste (champs de variante à None pour l'autre type)."""

    id: int
    type: Literal["star", "planet"]
    name: str
    description: str
    image: str
    position: Position | None = None
    mass: float
    temperature: float
    radius: float
    creation_date: datetime | None = None
    modification_date: datetime | None = None
    owner_id: int | None = None
    is_public: bool
    map_id: int | None = None
    brightness: float | None = None
    star_type: StarType | None = None
    is_water: bool | None = None
    is_life: bool | None = None
    planet_type: PlanetType | None = None

    @classmethod
    def from_entity(cls, obj: CelestialObject) -> CelestialObjectResponse:
        data = obj.model_dump()
        data["type"] = data.pop("kind")
        return cls(**data)


class MapRequest(BaseModel):
    """Modèle de requête pour créer ou modifier une carte."""

    name: str
    is_public: bool = False


class MapResponse(BaseModel):
    """Vue publique d'une carte et de ses objets visibles."""

    id: int
    name: str
    owner_id: int | None = None
    is_public: bool
    creation_date: datetime | None = None
    modification_date: datetime | None = None
    celestial_objects: list[CelestialObjectResponse] = []

    @classmethod
    def from_entity(cls, map_: Map) -> MapResponse:
        return cls(
            **map_.model_dump(exclude={"celestial_objects"}),
            celestial_objects=[CelestialObjectResponse.from_entity(o) for o in map_.celestial_objects],
        )


class RegisterRequest(BaseModel):
    """Payload pour l'inscription d'un nouvel utilisateur."""

    email: EmailStr
    username: str
    password: str


class UserUpdateRequest(RegisterRequest):
    """Payload de modification d'un utilisateur (mêmes champs que l'inscription)."""


class LoginRequest(BaseModel):
    """Payload pour la connexion d'un utilisateur."""

    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Vue publique d'un utilisateur (sans mot de passe ni jeton)."""

    id: int
    email: str
    username: str
    role: Role
    creation_date: datetime | None = None
    modification_date: datetime | None = None

    @classmethod
    def from_entity(cls, user: User) -> UserResponse:
        return cls(
            **user.model_dump(
                include={"id", "email", "username", "role", "creation_date", "modification_date"}
            )
        )


class TokenResponse(BaseModel):
    """Jetons renvoyés à la connexion et au rafraîchissement."""

    access_token: str
    refresh_token: str
    refresh_token_expiry_time: datetime
    token_type: str = "bearer"


class TokenRefreshRequest(BaseModel):
    """Jeton d'accès (éventuellement expiré) et jeton de rafraîchissement associé."""

    access_token: str
    refresh_token: str


class SpaceImageResponse(BaseModel):
    """Vue publique d'une image spatiale."""

    id: int
    title: str
    description: str
    image: str
    shooting_date: date

    @classmethod
    def from_entity(cls, image: SpaceImage) -> SpaceImageResponse:
        return cls(**image.model_dump())
