"""
Routes de gestion des jetons : rafraîchissement et révocation.

Le rafraîchissement accepte un jeton d'accès expiré (signature vérifiée, expiration ignorée)
accompagné du jeton de rafraîchissement mémorisé pour l'utilisateur.
"""

from datetime import UTC, datetime, timedelta

import structlog
from fastapi import APIRouter, Depends, Response

from backend.api.deps import get_container, get_current_user_id, get_user_service
from backend.api.schemas import TokenRefreshRequest, TokenResponse
from backend.apigw.errors import unauthorized
from backend.core.container import Container
from backend.core.http_constants import HTTP_NO_CONTENT
from backend.domain.auth import create_access_token, decode_token, generate_refresh_token
from backend.domain.entities import User
from backend.services.users import UserService

router = APIRouter(prefix="/v1/tokens", tags=["tokens"])
log = structlog.get_logger(__name__)


async def issue_tokens(user: User, users: UserService, c: Container) -> TokenResponse:
    """Émet un jeton d'accès et un nouveau jeton de rafraîchissement, mémorisé pour `user`."""
    settings = c.settings
    access_token = create_access_token(
        secret=settings.JWT_SECRET,
        alg=settings.JWT_ALG,
        expires_min=settings.JWT_EXPIRES_MIN,
        payload={
            "sub": str(user.id),
            "email": user.email,
            "username": user.username,
            "role": user.role.value,
        },
    )
    refresh_token = generate_refresh_token()
    expiry = datetime.now(UTC) + timedelta(days=settings.REFRESH_TOKEN_EXPIRES_DAYS)
    await users.store_refresh_token(user.id, refresh_token, expiry)
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        refresh_token_expiry_time=expiry,
    )


def _is_expired(expiry: datetime | None) -> bool:
    if expiry is None:
        return True
    # SQLite restitue des dates naïves (UTC)
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=UTC)
    return expiry <= datetime.now(UTC)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    payload: TokenRefreshRequest,
    c: Container = Depends(get_container),
    users: UserService = Depends(get_user_service),
):
    """Échange un couple (accès expiré, rafraîchissement) contre un nouveau couple."""
    data = decode_token(
        payload.access_token, c.settings.JWT_SECRET, c.settings.JWT_ALG, verify_exp=False
    )
    if data is None or data.user_id is None:
        raise unauthorized("invalid_token")
    user = await users.get_by_id(data.user_id)
    if (
        user is None
        or user.refresh_token != payload.refresh_token
        or _is_expired(user.refresh_token_expiry_time)
    ):
        log.info("token_refresh_refused", user_id=data.user_id)
        raise unauthorized("invalid_refresh_token")
    log.info("token_refreshed", user_id=user.id)
    return await issue_tokens(user, users, c)


@router.post("/revoke", status_code=HTTP_NO_CONTENT)
async def revoke(
    user_id: int = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
):
    """Efface le jeton de rafraîchissement de l'utilisateur authentifié."""
    await users.revoke_refresh_token(user_id)
    return Response(status_code=HTTP_NO_CONTENT)
