"""
Tests des routes `/v1/users` et `/v1/tokens`.

Inscription, connexion, rafraîchissement/révocation des jetons et droits d'administration.
"""

from __future__ import annotations

import asyncio

from backend.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_CONFLICT,
    HTTP_CREATED,
    HTTP_FORBIDDEN,
    HTTP_NO_CONTENT,
    HTTP_NOT_FOUND,
    HTTP_OK,
    HTTP_UNAUTHORIZED,
    HTTP_UNPROCESSABLE_ENTITY,
    TOTAL_COUNT_HEADER,
)
from backend.domain.auth import create_access_token, decode_token
from backend.domain.entities import Role
from tests.fakes import DEFAULT_PASSWORD, register_and_login

JWT_SECRET = "test-secret"


def _promote(container, user_id: int) -> None:
    """Passe un utilisateur administrateur directement dans le dépôt."""
    repo = container.user_repo
    user = asyncio.run(repo.get_by_id(user_id))
    asyncio.run(repo.update(user_id, user.model_copy(update={"role": Role.ADMINISTRATOR})))


def _login(client, email: str, password: str = DEFAULT_PASSWORD):
    return client.post("/v1/users/login", json={"email": email, "password": password})


def test_register_and_login(client):
    r = client.post(
        "/v1/users/register",
        json={"email": "ada@stellar.io", "username": "ada", "password": DEFAULT_PASSWORD},
    )
    assert r.status_code == HTTP_CREATED
    body = r.json()
    assert body["role"] == "Member"
    assert "password" not in body

    r = _login(client, "ada@stellar.io")
    assert r.status_code == HTTP_OK
    tokens = r.json()
    assert tokens["token_type"] == "bearer"
    assert tokens["refresh_token"]
    claims = decode_token(tokens["access_token"], JWT_SECRET, "HS256")
    assert claims.user_id == body["id"]
    assert claims.email == "ada@stellar.io"
    assert claims.username == "ada"
    assert claims.role == Role.MEMBER


def test_register_rejections(client):
    """Teste les refus d'inscription: email dupliqué (409), invalide (422), nom vide (400)."""
    register_and_login(client, "ada@stellar.io")

    r = client.post(
        "/v1/users/register",
        json={"email": "ada@stellar.io", "username": "ada2", "password": "x"},
    )
    assert r.status_code == HTTP_CONFLICT
    assert r.json()["code"] == "CONFLICT"

    r = client.post(
        "/v1/users/register", json={"email": "nope", "username": "x", "password": "x"}
    )
    assert r.status_code == HTTP_UNPROCESSABLE_ENTITY

    r = client.post(
        "/v1/users/register",
        json={"email": "grace@stellar.io", "username": "", "password": "x"},
    )
    assert r.status_code == HTTP_BAD_REQUEST
    assert r.json()["details"]["field"] == "username"


def test_bad_credentials(client):
    register_and_login(client, "ada@stellar.io")

    r = _login(client, "ada@stellar.io", "wrong-password")
    assert r.status_code == HTTP_BAD_REQUEST
    assert r.json()["message"] == "invalid_credentials"
    assert _login(client, "nobody@stellar.io").status_code == HTTP_BAD_REQUEST


def test_refresh_rotates_tokens(client):
    """Teste que le rafraîchissement émet un nouveau couple et invalide l'ancien jeton."""
    register_and_login(client, "ada@stellar.io")
    first = _login(client, "ada@stellar.io").json()

    r = client.post(
        "/v1/tokens/refresh",
        json={"access_token": first["access_token"], "refresh_token": first["refresh_token"]},
    )
    assert r.status_code == HTTP_OK, r.text
    second = r.json()
    assert second["refresh_token"] != first["refresh_token"]

    r = client.post(
        "/v1/tokens/refresh",
        json={"access_token": first["access_token"], "refresh_token": first["refresh_token"]},
    )
    assert r.status_code == HTTP_UNAUTHORIZED
    assert r.json()["message"] == "invalid_refresh_token"


def test_refresh_accepts_expired_access_token(client):
    user_id, _ = register_and_login(client, "ada@stellar.io")
    tokens = _login(client, "ada@stellar.io").json()
    expired = create_access_token(
        JWT_SECRET,
        "HS256",
        -5,
        {"sub": str(user_id), "email": "ada@stellar.io", "username": "stargazer", "role": "Member"},
    )

    r = client.post(
        "/v1/tokens/refresh",
        json={"access_token": expired, "refresh_token": tokens["refresh_token"]},
    )
    assert r.status_code == HTTP_OK

    r = client.get(f"/v1/users/{user_id}", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == HTTP_UNAUTHORIZED


def test_refresh_rejects_forged_token(client):
    register_and_login(client, "ada@stellar.io")
    tokens = _login(client, "ada@stellar.io").json()
    forged = create_access_token(
        "other-secret", "HS256", 5, {"sub": "1", "email": "a@stellar.io", "username": "a"}
    )

    r = client.post(
        "/v1/tokens/refresh",
        json={"access_token": forged, "refresh_token": tokens["refresh_token"]},
    )
    assert r.status_code == HTTP_UNAUTHORIZED
    assert r.json()["message"] == "invalid_token"


def test_revoke_invalidates_refresh_token(client):
    register_and_login(client, "ada@stellar.io")
    tokens = _login(client, "ada@stellar.io").json()
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}

    assert client.post("/v1/tokens/revoke", headers=headers).status_code == HTTP_NO_CONTENT
    r = client.post(
        "/v1/tokens/refresh",
        json={"access_token": tokens["access_token"], "refresh_token": tokens["refresh_token"]},
    )
    assert r.status_code == HTTP_UNAUTHORIZED


def test_admin_only_listing_and_deletion(client, container):
    """Teste les routes réservées aux administrateurs."""
    admin_id, admin = register_and_login(client, "admin@stellar.io", username="admin")
    member_id, member = register_and_login(client, "member@stellar.io", username="member")

    r = client.get("/v1/users", headers=member)
    assert r.status_code == HTTP_FORBIDDEN
    assert r.json()["message"] == "administrator_required"

    _promote(container, admin_id)
    r = client.get("/v1/users", headers=admin)
    assert r.status_code == HTTP_OK
    assert r.headers[TOTAL_COUNT_HEADER] == "2"
    assert {u["username"] for u in r.json()} == {"admin", "member"}

    assert client.delete(f"/v1/users/{member_id}", headers=member).status_code == HTTP_FORBIDDEN
    assert client.delete(f"/v1/users/{member_id}", headers=admin).status_code == HTTP_NO_CONTENT
    assert client.get(f"/v1/users/{member_id}", headers=admin).status_code == HTTP_NOT_FOUND
    assert client.delete(f"/v1/users/{member_id}", headers=admin).status_code == HTTP_NOT_FOUND

    r = client.get("/v1/users", headers=member)
    assert r.status_code == HTTP_UNAUTHORIZED
    assert r.json()["message"] == "user_not_found"


def test_update_self_or_admin(client, container):
    admin_id, admin = register_and_login(client, "admin@stellar.io", username="admin")
    member_id, member = register_and_login(client, "member@stellar.io", username="member")
    payload = {"email": "member2@stellar.io", "username": "renamed", "password": "new-pass"}

    assert client.put(f"/v1/users/{admin_id}", json=payload, headers=member).status_code == HTTP_FORBIDDEN

    r = client.put(f"/v1/users/{member_id}", json=payload, headers=member)
    assert r.status_code == HTTP_OK
    assert r.json()["username"] == "renamed"
    assert _login(client, "member2@stellar.io", "new-pass").status_code == HTTP_OK

    _promote(container, admin_id)
    r = client.put(
        f"/v1/users/{member_id}",
        json={**payload, "username": "by-admin"},
        headers=admin,
    )
    assert r.status_code == HTTP_OK
    assert r.json()["username"] == "by-admin"

    r = client.put(
        f"/v1/users/{member_id}",
        json={**payload, "email": "admin@stellar.io"},
        headers=admin,
    )
    assert r.status_code == HTTP_CONFLICT
