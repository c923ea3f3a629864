"""Définition et chargement des paramètres de configuration applicative.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
"""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def resolve_env_file(cwd: Path | None = None) -> Path:
    """Retourne le fichier .env à charger.

    Priorité: 1) ENV_FILE (chemin explicite), 2) .env.{APP_ENV} si présent, 3) .env.
    """
    explicit = os.getenv("ENV_FILE")
    if explicit:
        return Path(explicit)
    base = cwd or Path.cwd()
    specific = base / f".env.{os.getenv('APP_ENV', 'dev')}"
    return specific if specific.exists() else base / ".env"


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=resolve_env_file(),
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )
    APP_NAME: str = "stellar-api"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000

    # Absent: dépôts en mémoire. Ex: sqlite+aiosqlite:///./stellar.db
    DATABASE_URL: str | None = None
    DATABASE_ECHO: bool = False
    # JWT/Auth
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALG: str = "HS256"
    JWT_EXPIRES_MIN: int = 30
    REFRESH_TOKEN_EXPIRES_DAYS: int = 7
    # API Astronomy Picture of the Day (NASA)
    APOD_URL: str = "https://api.nasa.gov/planetary/apod"
    APOD_API_KEY: str = "DEMO_KEY"
    APOD_TIMEOUT_S: float = 10.0

    OTLP_ENDPOINT: str | None = None


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings()
