"""
Tests du service des images spatiales (cache de l'image du jour).
"""

from __future__ import annotations

from datetime import date

import pytest

from backend.domain.entities import SpaceImage
from backend.domain.errors import SpaceImageFetchError
from backend.infra.repositories import InMemorySpaceImageRepo
from backend.services.space_images import SpaceImageService
from tests.fakes import FailingSpaceImageFetcher, FakeClock, FakeSpaceImageFetcher


@pytest.mark.asyncio
async def test_image_of_the_day_is_fetched_once_then_cached() -> None:
    """Teste le cache-aside: un seul appel externe pour plusieurs lectures du jour."""
    clock = FakeClock()
    fetcher = FakeSpaceImageFetcher()
    service = SpaceImageService(InMemorySpaceImageRepo(), fetcher, clock=clock)

    first = await service.get_by_date()
    second = await service.get_by_date(clock.now.date())

    assert fetcher.calls == 1
    assert first.id is not None
    assert second.id == first.id
    assert first.shooting_date == clock.now.date()
    assert first.title == "Pillars of Creation"
    assert await service.count() == 1


@pytest.mark.asyncio
async def test_next_day_fetches_again() -> None:
    clock = FakeClock()
    fetcher = FakeSpaceImageFetcher()
    service = SpaceImageService(InMemorySpaceImageRepo(), fetcher, clock=clock)

    await service.get_by_date()
    clock.advance(days=1)
    await service.get_by_date()

    assert fetcher.calls == 2  # noqa: PLR2004
    assert await service.count() == 2  # noqa: PLR2004


@pytest.mark.asyncio
async def test_past_date_reads_store_only() -> None:
    fetcher = FakeSpaceImageFetcher()
    service = SpaceImageService(InMemorySpaceImageRepo(), fetcher, clock=FakeClock())

    assert await service.get_by_date(date(2001, 1, 1)) is None
    assert fetcher.calls == 0


@pytest.mark.parametrize("field", ["title", "description", "image"])
@pytest.mark.asyncio
async def test_incomplete_image_is_not_stored(field) -> None:
    """Teste qu'une image sans titre, description ou URL est rejetée et non stockée."""
    complete = FakeSpaceImageFetcher().image
    fetcher = FakeSpaceImageFetcher(image=complete.model_copy(update={field: "  "}))
    service = SpaceImageService(InMemorySpaceImageRepo(), fetcher, clock=FakeClock())

    with pytest.raises(SpaceImageFetchError):
        await service.get_by_date()
    assert await service.count() == 0


@pytest.mark.asyncio
async def test_fetch_failure_propagates() -> None:
    service = SpaceImageService(InMemorySpaceImageRepo(), FailingSpaceImageFetcher(), clock=FakeClock())
    with pytest.raises(SpaceImageFetchError):
        await service.get_by_date()


@pytest.mark.asyncio
async def test_get_and_list() -> None:
    repo = InMemorySpaceImageRepo()
    stored = await repo.add(
        SpaceImage(title="M31", description="Andromeda.", image="https://x/m31.jpg", shooting_date=date(2023, 3, 3))
    )
    service = SpaceImageService(repo, FakeSpaceImageFetcher(), clock=FakeClock())

    assert (await service.get(stored.id)).title == "M31"
    assert await service.get(999) is None
    assert [i.title for i in await service.list(1, 10)] == ["M31"]


@pytest.mark.asyncio
async def test_memory_repo_keeps_one_image_per_date() -> None:
    repo = InMemorySpaceImageRepo()
    day = date(2023, 3, 3)
    first = await repo.add(
        SpaceImage(title="M31", description="Andromeda.", image="https://x/m31.jpg", shooting_date=day)
    )
    second = await repo.add(
        SpaceImage(title="M42", description="Orion.", image="https://x/m42.jpg", shooting_date=day)
    )

    assert second.id == first.id
    assert await repo.count() == 1
