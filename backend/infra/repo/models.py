"""Modèles SQLAlchemy de la couche de persistance (utilisateurs, cartes, objets, images)."""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles SQLAlchemy."""

    metadata = MetaData()


class UserORM(Base):
    """Modèle ORM des utilisateurs."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(100), nullable=False, unique=True)
    username = Column(String(30), nullable=False)
    password = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="Member")
    refresh_token = Column(String(255), nullable=True)
    refresh_token_expiry_time = Column(DateTime(timezone=True), nullable=True)
    creation_date = Column(DateTime(timezone=True), nullable=True)
    modification_date = Column(DateTime(timezone=True), nullable=True)


class MapORM(Base):
    """Modèle ORM des cartes."""

    __tablename__ = "maps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    owner_id = Column(Integer, nullable=True, index=True)
    is_public = Column(Boolean, nullable=False, default=False)
    creation_date = Column(DateTime(timezone=True), nullable=True)
    modification_date = Column(DateTime(timezone=True), nullable=True)


class CelestialObjectORM(Base):
    """Modèle ORM des objets célestes (table unique, variante portée par `kind`).

    Les colonnes propres à une variante restent NULL pour l'autre.
    """

    __tablename__ = "celestial_objects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(16), nullable=False)
    name = Column(String(100), nullable=False)
    description = Column(String(1000), nullable=False)
    image = Column(String(1024), nullable=False, default="")
    position_x = Column(Integer, nullable=True)
    position_y = Column(Integer, nullable=True)
    position_z = Column(Integer, nullable=True)
    mass = Column(Float, nullable=False)
    temperature = Column(Float, nullable=False)
    radius = Column(Float, nullable=False)
    creation_date = Column(DateTime(timezone=True), nullable=True)
    modification_date = Column(DateTime(timezone=True), nullable=True)
    owner_id = Column(Integer, nullable=True, index=True)
    is_public = Column(Boolean, nullable=False, default=False)
    map_id = Column(Integer, ForeignKey("maps.id", ondelete="SET NULL"), nullable=True, index=True)
    # Star
    brightness = Column(Float, nullable=True)
    star_type = Column(String(32), nullable=True)
    # Planet
    is_water = Column(Boolean, nullable=True)
    is_life = Column(Boolean, nullable=True)
    planet_type = Column(String(32), nullable=True)


class SpaceImageORM(Base):
    """Modèle ORM des images spatiales (une par date de prise de vue)."""

    __tablename__ = "space_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    image = Column(String(1024), nullable=False)
    shooting_date = Column(Date, nullable=False, unique=True)
