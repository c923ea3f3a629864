"""
Routes des utilisateurs : inscription, connexion et administration des comptes.

Ce module fournit les endpoints `/v1/users`. La connexion renvoie un jeton d'accès JWT et un
jeton de rafraîchissement (voir `routes_tokens`).
"""

import structlog
from fastapi import APIRouter, Depends, Query, Response

from backend.api.deps import (
    get_container,
    get_current_user,
    get_current_user_id,
    get_user_service,
    require_admin,
)
from backend.api.routes_tokens import issue_tokens
from backend.api.schemas import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
    UserUpdateRequest,
)
from backend.apigw.errors import bad_request, forbidden, not_found
from backend.core.container import Container
from backend.core.http_constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    HTTP_CREATED,
    HTTP_NO_CONTENT,
    TOTAL_COUNT_HEADER,
)
from backend.domain.entities import Role, User
from backend.services.users import UserService

router = APIRouter(prefix="/v1/users", tags=["users"])
log = structlog.get_logger(__name__)

users_dep = Depends(get_user_service)
admin_dep = Depends(require_admin)


@router.post("/register", response_model=UserResponse, status_code=HTTP_CREATED)
async def register(payload: RegisterRequest, users: UserService = users_dep):
    """Inscrit un nouvel utilisateur (rôle Member)."""
    user = await users.create(
        User(email=str(payload.email), username=payload.username, password=payload.password)
    )
    return UserResponse.from_entity(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    users: UserService = users_dep,
    c: Container = Depends(get_container),
):
    """Authentifie un utilisateur et retourne ses jetons ; identifiants invalides : 400."""
    user = await users.authenticate(str(payload.email), payload.password)
    if user is None:
        raise bad_request("invalid_credentials")
    log.info("user_logged_in", user_id=user.id)
    return await issue_tokens(user, users, c)


@router.get("", response_model=list[UserResponse])
async def list_users(
    response: Response,
    page: int = Query(DEFAULT_PAGE),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
    _admin: User = admin_dep,
    users: UserService = users_dep,
):
    """Liste paginée des utilisateurs (administrateurs uniquement)."""
    found = await users.list(page, page_size)
    response.headers[TOTAL_COUNT_HEADER] = str(await users.count())
    return [UserResponse.from_entity(u) for u in found]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    _requester: int = Depends(get_current_user_id),
    users: UserService = users_dep,
):
    user = await users.get_by_id(user_id)
    if user is None:
        raise not_found(f"The user n°{user_id} was not found.")
    return UserResponse.from_entity(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    payload: UserUpdateRequest,
    requester: User = Depends(get_current_user),
    users: UserService = users_dep,
):
    """Modifie un compte : le sien, ou n'importe lequel pour un administrateur."""
    if requester.id != user_id and requester.role != Role.ADMINISTRATOR:
        raise forbidden("You can only edit your own account.")
    updated = await users.update(
        user_id,
        User(email=str(payload.email), username=payload.username, password=payload.password),
    )
    return UserResponse.from_entity(updated)


@router.delete("/{user_id}", status_code=HTTP_NO_CONTENT)
async def delete_user(user_id: int, _admin: User = admin_dep, users: UserService = users_dep):
    """Supprime définitivement un compte (administrateurs uniquement)."""
    await users.delete(user_id)
    return Response(status_code=HTTP_NO_CONTENT)
