"""Shared pytest fixtures for the hosuto test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config.settings import Settings
from src.interfaces.image_provider import IImageProvider
from src.models.image import Image, ImageListPage
from src.providers.cache.memory_cache import MemoryCacheProvider

DELIVERY_BASE = "https://imagedelivery.net/hash"


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_image(image_id: str, filename: str, variants: list[str] | None = None) -> Image:
    """Build an Image whose variant URLs live under the delivery base."""
    names = variants if variants is not None else ["public", "thumbnail"]
    return Image(
        id=image_id,
        filename=filename,
        variants=[f"{DELIVERY_BASE}/{image_id}/{name}" for name in names],
    )


def make_settings(**overrides) -> Settings:
    """Settings with test credentials and an in-memory store."""
    defaults = {
        "cloudflare_email": "ops@example.com",
        "cloudflare_api_key": "test-key",
        "cloudflare_account_id": "acct-123",
        "cloudflare_api_base_url": "https://api.cloudflare.test/client/v4",
        "kv_backend": "memory",
        "app_env": "test",
    }
    defaults.update(overrides)
    return Settings(**defaults)


class FakeClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_directory() -> list[Image]:
    """Three images spread over the pages served by ``paged_provider``."""
    return [
        make_image("a1b2c3", "sunset.png"),
        make_image("d4e5f6", "harbour.jpg", ["public"]),
        make_image("0f9e8d", "sunrise.png", ["thumbnail", "public", "original"]),
    ]


@pytest.fixture
def paged_provider(sample_directory: list[Image]) -> IImageProvider:
    """Mock IImageProvider serving ``sample_directory`` as two pages."""
    pages = {
        None: ImageListPage(images=sample_directory[:2], continuation_token="page-2"),
        "page-2": ImageListPage(images=sample_directory[2:], continuation_token=None),
    }

    async def _list_images(account_id: str, continuation_token: str | None = None) -> ImageListPage:
        return pages[continuation_token]

    mock = MagicMock(spec=IImageProvider)
    mock.get_provider_name.return_value = "mock-images"
    mock.is_available.return_value = True
    mock.list_images = AsyncMock(side_effect=_list_images)
    mock.fetch_rendition = AsyncMock()
    return mock


@pytest.fixture
def memory_store() -> MemoryCacheProvider:
    return MemoryCacheProvider()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
