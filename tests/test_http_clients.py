"""
Tests du client APOD avec un transport httpx simulé (aucun appel réseau).
"""

from __future__ import annotations

from datetime import date

import httpx
import pytest

from backend.domain.errors import SpaceImageFetchError
from backend.infra.http_clients import ApodClient

APOD_URL = "https://api.nasa.gov/planetary/apod"


def _client(handler) -> ApodClient:
    return ApodClient(APOD_URL, "KEY", timeout_s=1.0, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_prefers_hd_url_and_forwards_api_key() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "title": "Horsehead Nebula",
                "explanation": "A dark nebula in Orion.",
                "url": "https://apod.nasa.gov/horsehead.jpg",
                "hdurl": "https://apod.nasa.gov/horsehead_hd.jpg",
                "date": "2024-02-29",
            },
        )

    image = await _client(handler).fetch_image_of_the_day()

    assert seen[0].url.params["api_key"] == "KEY"
    assert image.title == "Horsehead Nebula"
    assert image.description == "A dark nebula in Orion."
    assert image.image == "https://apod.nasa.gov/horsehead_hd.jpg"
    assert image.shooting_date == date(2024, 2, 29)


@pytest.mark.asyncio
async def test_falls_back_to_standard_url() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"title": "Video day", "explanation": "Clip.", "url": "https://youtu.be/x"}
        )

    image = await _client(handler).fetch_image_of_the_day()

    assert image.image == "https://youtu.be/x"


@pytest.mark.asyncio
async def test_http_error_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "down"})

    with pytest.raises(SpaceImageFetchError, match="from the API"):
        await _client(handler).fetch_image_of_the_day()


@pytest.mark.asyncio
async def test_invalid_json_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>not json</html>")

    with pytest.raises(SpaceImageFetchError, match="deserializing"):
        await _client(handler).fetch_image_of_the_day()
