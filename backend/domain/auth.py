"""
Module d'authentification et de gestion des tokens.

Ce module fournit les fonctions pour le hachage des mots de passe, la création et validation des
tokens JWT d'accès, et la génération des jetons de rafraîchissement opaques.
"""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError
from passlib.context import CryptContext
from pydantic import BaseModel

from backend.domain.entities import Role

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

REFRESH_TOKEN_BYTES = 32


class TokenData(BaseModel):
    """Données contenues dans un token JWT."""

    sub: str
    email: str
    username: str
    role: Role = Role.MEMBER

    @property
    def user_id(self) -> int | None:
        """Identifiant numérique porté par `sub`, ou None s'il n'est pas entier."""
        try:
            return int(self.sub)
        except ValueError:
            return None


def hash_password(p: str) -> str:
    """Hache un mot de passe en utilisant PBKDF2."""
    return pwd_context.hash(p)


def verify_password(p: str, h: str) -> bool:
    """Vérifie un mot de passe contre son hash."""
    return pwd_context.verify(p, h)


def create_access_token(
    secret: str, alg: str, expires_min: int, payload: dict[str, Any]
) -> str:
    """Crée un token JWT d'accès avec expiration."""
    to_encode = payload.copy()
    expire = datetime.now(UTC) + timedelta(minutes=expires_min)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret, algorithm=alg)


def decode_token(token: str, secret: str, alg: str, verify_exp: bool = True) -> TokenData | None:
    """Décode et valide un token JWT.

    `verify_exp=False` sert au rafraîchissement : le token d'accès présenté est normalement
    expiré, seule sa signature est vérifiée.
    """
    try:
        data = jwt.decode(token, secret, algorithms=[alg], options={"verify_exp": verify_exp})
        return TokenData(**data)
    except (InvalidTokenError, ValueError):
        return None


def generate_refresh_token() -> str:
    """Génère un jeton de rafraîchissement opaque (32 octets aléatoires, base64 url)."""
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)
