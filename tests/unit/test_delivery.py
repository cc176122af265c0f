"""Unit tests for DeliveryAssembler streaming and headers."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.interfaces.image_provider import IImageProvider
from src.models.image import Resolution
from src.providers.images.cloudflare_provider import CloudflareImagesProvider
from src.services.delivery import DeliveryAssembler
from src.utils.errors import FetchError
from tests.conftest import make_image, make_settings

_PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _resolution() -> Resolution:
    image = make_image("a1b2c3", "sunset.png")
    return Resolution(image=image, url=image.variants[0])


async def _chunks(body: bytes, size: int = 16):  # noqa: ANN202
    for start in range(0, len(body), size):
        yield body[start : start + size]


def _client(status: int = 200, body: bytes = _PNG, headers: dict | None = None) -> httpx.AsyncClient:
    # An async iterable body stays unread until the assembler streams it,
    # like a response coming off a real connection.
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status,
            content=_chunks(body),
            headers=headers if headers is not None else {"content-type": "image/png"},
        )

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def _drain(response) -> bytes:  # noqa: ANN001
    body = b"".join([chunk async for chunk in response.body_iterator])
    if response.background is not None:
        await response.background()
    return body


class TestDeliveryAssembler:
    @pytest.mark.asyncio
    async def test_streams_body_with_delivery_headers(self) -> None:
        async with _client() as client:
            assembler = DeliveryAssembler(CloudflareImagesProvider(make_settings(), client))
            resolution = _resolution()

            response = await assembler.deliver(resolution)
            body = await _drain(response)

        assert response.status_code == 200
        assert body == _PNG
        assert response.headers["content-type"] == "image/png"
        assert response.headers["content-disposition"] == 'inline; filename="sunset.png"'
        assert response.headers["cache-control"] == "public, max-age=7776000"
        assert response.headers["x-original-url"] == resolution.url
        assert response.headers["x-image-id"] == "a1b2c3"

    @pytest.mark.asyncio
    async def test_upstream_status_passes_through(self) -> None:
        async with _client(status=404, body=b"gone", headers={"content-type": "text/plain"}) as client:
            assembler = DeliveryAssembler(CloudflareImagesProvider(make_settings(), client))

            response = await assembler.deliver(_resolution())
            body = await _drain(response)

        assert response.status_code == 404
        assert body == b"gone"
        assert response.headers["x-image-id"] == "a1b2c3"

    @pytest.mark.asyncio
    async def test_upstream_cache_control_is_replaced(self) -> None:
        headers = {
            "content-type": "image/png",
            "cache-control": "private, max-age=60",
            "etag": '"v1"',
        }
        async with _client(headers=headers) as client:
            assembler = DeliveryAssembler(CloudflareImagesProvider(make_settings(), client))

            response = await assembler.deliver(_resolution())
            await _drain(response)

        assert response.headers.getlist("cache-control") == ["public, max-age=7776000"]
        assert response.headers["etag"] == '"v1"'

    @pytest.mark.asyncio
    async def test_hop_by_hop_headers_dropped(self) -> None:
        headers = {"content-type": "image/png", "connection": "keep-alive", "keep-alive": "timeout=5"}
        async with _client(headers=headers) as client:
            assembler = DeliveryAssembler(CloudflareImagesProvider(make_settings(), client))

            response = await assembler.deliver(_resolution())
            await _drain(response)

        assert "connection" not in response.headers
        assert "keep-alive" not in response.headers

    @pytest.mark.asyncio
    async def test_custom_max_age(self) -> None:
        async with _client() as client:
            assembler = DeliveryAssembler(
                CloudflareImagesProvider(make_settings(), client), max_age=3600
            )

            response = await assembler.deliver(_resolution())
            await _drain(response)

        assert response.headers["cache-control"] == "public, max-age=3600"

    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self) -> None:
        provider = MagicMock(spec=IImageProvider)
        provider.fetch_rendition = AsyncMock(side_effect=FetchError("connection refused"))

        with pytest.raises(FetchError):
            await DeliveryAssembler(provider).deliver(_resolution())

    @pytest.mark.asyncio
    async def test_body_is_streamed_in_chunks(self) -> None:
        async with _client(body=b"x" * 40) as client:
            assembler = DeliveryAssembler(CloudflareImagesProvider(make_settings(), client))

            response = await assembler.deliver(_resolution())
            chunks = [chunk async for chunk in response.body_iterator]
            await response.background()

        assert len(chunks) > 1
        assert b"".join(chunks) == b"x" * 40
        assert "transfer-encoding" not in response.headers


class TestDeliveryHeaders:
    def test_ascii_filename(self) -> None:
        headers = DeliveryAssembler(MagicMock(spec=IImageProvider)).delivery_headers(_resolution())
        assert headers["content-disposition"] == 'inline; filename="sunset.png"'

    def test_non_latin1_filename_gets_encoded_form(self) -> None:
        image = make_image("a1b2c3", "写真.png")
        resolution = Resolution(image=image, url=image.variants[0])

        disposition = DeliveryAssembler(MagicMock(spec=IImageProvider)).delivery_headers(resolution)[
            "content-disposition"
        ]

        assert disposition == "inline; filename=\"??.png\"; filename*=UTF-8''%E5%86%99%E7%9C%9F.png"
        disposition.encode("latin-1")

    def test_quotes_in_filename_are_escaped(self) -> None:
        image = make_image("a1b2c3", 'say "hi".png')
        resolution = Resolution(image=image, url=image.variants[0])

        disposition = DeliveryAssembler(MagicMock(spec=IImageProvider)).delivery_headers(resolution)[
            "content-disposition"
        ]

        assert disposition == 'inline; filename="say \\"hi\\".png"'
