"""
Tests pour la traduction des erreurs en enveloppes API.

Ce module teste la correspondance erreurs métier / codes HTTP, le contenu des enveloppes et les
fonctions utilitaires de création d'erreurs.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from backend.apigw.errors import (
    APIError,
    ErrorCodes,
    bad_request,
    create_error_response,
    extract_trace_id,
    forbidden,
    handle_domain_error,
    handle_generic_exception,
    handle_http_exception,
    not_found,
    status_for,
    unauthorized,
)
from backend.core.http_constants import (
    HTTP_BAD_GATEWAY,
    HTTP_BAD_REQUEST,
    HTTP_CONFLICT,
    HTTP_FORBIDDEN,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_SERVICE_UNAVAILABLE,
    HTTP_UNAUTHORIZED,
)
from backend.domain.errors import (
    AlreadyLinked,
    DomainError,
    DuplicateUser,
    Forbidden,
    NotFound,
    NotLinked,
    SpaceImageFetchError,
    StoreUnavailable,
    ValidationError,
)


def _request(request_id: str | None = "req-1", headers: dict | None = None) -> MagicMock:
    request = MagicMock()
    request.headers = headers or {}
    request.state = MagicMock()
    request.state.request_id = request_id
    request.url.path = "/v1/test"
    return request


def _body(response) -> dict:
    return json.loads(response.body.decode())


class TestDomainErrorMapping:
    """Correspondance erreurs métier / statuts HTTP."""

    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (ValidationError("name", "cannot be null or empty"), HTTP_BAD_REQUEST),
            (NotFound("map", 1), HTTP_NOT_FOUND),
            (Forbidden("no"), HTTP_FORBIDDEN),
            (AlreadyLinked(1, 2), HTTP_BAD_REQUEST),
            (NotLinked(1, 2), HTTP_BAD_REQUEST),
            (StoreUnavailable(), HTTP_SERVICE_UNAVAILABLE),
            (DuplicateUser("dup"), HTTP_CONFLICT),
            (SpaceImageFetchError("down"), HTTP_BAD_GATEWAY),
            (DomainError("unknown"), HTTP_INTERNAL_SERVER_ERROR),
        ],
    )
    def test_status_for(self, error, status) -> None:
        assert status_for(error) == status

    def test_validation_error_envelope(self) -> None:
        """Teste que l'enveloppe d'une erreur de validation porte champ et motif."""
        response = handle_domain_error(_request(), ValidationError("mass", "must be greater than 0"))

        assert response.status_code == HTTP_BAD_REQUEST
        body = _body(response)
        assert body["code"] == "VALIDATION_ERROR"
        assert body["trace_id"] == "req-1"
        assert body["details"] == {"field": "mass", "reason": "must be greater than 0"}

    def test_not_found_envelope_has_no_details(self) -> None:
        response = handle_domain_error(_request(), NotFound("celestial object", 7))

        body = _body(response)
        assert body["code"] == "NOT_FOUND"
        assert body["message"] == "The celestial object n°7 was not found."
        assert "details" not in body


class TestEnvelopeHelpers:
    """Fonctions utilitaires et gestionnaires génériques."""

    def test_create_error_response_minimal(self) -> None:
        response = create_error_response(status_code=500, code="INTERNAL_ERROR", message="boom")
        body = _body(response)
        assert body["trace_id"] is None
        assert "details" not in body

    def test_trace_id_header_wins_over_request_id(self) -> None:
        assert extract_trace_id(_request(headers={"X-Trace-ID": "trace-9"})) == "trace-9"
        assert extract_trace_id(_request()) == "req-1"
        assert extract_trace_id(_request(request_id=None)) is None

    def test_http_exception_envelope(self) -> None:
        response = handle_http_exception(_request(), HTTPException(status_code=404, detail="Not found"))
        assert response.status_code == HTTP_NOT_FOUND
        assert _body(response)["code"] == "NOT_FOUND"

    def test_api_error_keeps_headers(self) -> None:
        response = handle_http_exception(_request(), unauthorized("missing_token"))
        assert response.status_code == HTTP_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert _body(response)["message"] == "missing_token"

    def test_generic_exception_is_masked(self) -> None:
        response = handle_generic_exception(_request(), ValueError("secret detail"))
        assert response.status_code == HTTP_INTERNAL_SERVER_ERROR
        body = _body(response)
        assert body["code"] == ErrorCodes.INTERNAL_ERROR
        assert body["message"] == "An unexpected error occurred"

    def test_convenience_functions(self) -> None:
        error = bad_request("invalid_credentials")
        assert isinstance(error, APIError)
        assert error.status_code == HTTP_BAD_REQUEST
        assert forbidden("no").code == ErrorCodes.FORBIDDEN
        assert not_found("gone").status_code == HTTP_NOT_FOUND
