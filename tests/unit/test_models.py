"""Unit tests for image models, directory serialization, and errors."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from src.models.image import IMAGE_DIRECTORY_ADAPTER, Image, RefreshResult, dump_directory
from src.utils.errors import (
    CacheCorruptError,
    FetchError,
    HosutoError,
    ImageNotFoundError,
    NotFoundKind,
    ProviderError,
)
from tests.conftest import make_image


class TestImage:
    def test_accepts_provider_field_names(self) -> None:
        image = Image.model_validate(
            {
                "id": "a1",
                "filename": "a.png",
                "uploaded": "2024-04-01T10:00:00.000Z",
                "requireSignedURLs": True,
                "variants": ["https://x/a1/public"],
                "draft": False,
            }
        )

        assert image.require_signed_urls is True
        assert image.uploaded == datetime(2024, 4, 1, 10, 0, tzinfo=timezone.utc)

    def test_is_frozen(self) -> None:
        image = make_image("a1", "a.png")
        with pytest.raises(ValidationError):
            image.filename = "b.png"

    def test_id_is_required(self) -> None:
        with pytest.raises(ValidationError):
            Image.model_validate({"filename": "a.png"})


class TestDirectorySerialization:
    def test_dump_uses_provider_field_names(self) -> None:
        payload = json.loads(dump_directory([make_image("a1", "a.png")]))

        assert payload[0]["requireSignedURLs"] is False
        assert "uploaded" not in payload[0]

    def test_round_trip_preserves_order_and_fields(self) -> None:
        directory = [
            make_image("b2", "zeta.png", ["thumbnail", "public"]),
            Image(
                id="a1",
                filename="alpha.png",
                variants=["https://x/a1/public"],
                uploaded=datetime(2024, 4, 1, 10, 0, tzinfo=timezone.utc),
                meta={"album": "coast"},
            ),
        ]

        restored = IMAGE_DIRECTORY_ADAPTER.validate_json(dump_directory(directory))

        assert restored == directory
        assert restored[0].variants == directory[0].variants

    def test_empty_directory(self) -> None:
        assert dump_directory([]) == "[]"


class TestRefreshResult:
    def test_size_mib_two_decimals(self) -> None:
        result = RefreshResult(directory=[], updated="2024-05-01T12:00:00.000000Z", size_bytes=3 * 1024 * 1024 // 2)
        assert result.size_mib == "1.50"

    def test_size_mib_small(self) -> None:
        result = RefreshResult(directory=[], updated="x", size_bytes=2)
        assert result.size_mib == "0.00"


class TestErrors:
    def test_provider_prefix_in_str(self) -> None:
        err = ProviderError("HTTP 500 listing images", provider_name="cloudflare_images")
        assert str(err) == "[cloudflare_images] HTTP 500 listing images"
        assert err.message == "HTTP 500 listing images"

    def test_defaults(self) -> None:
        assert FetchError().message == "Rendition fetch failed"
        assert str(CacheCorruptError()) == "Cached image directory is corrupt"

    def test_not_found_image_message(self) -> None:
        err = ImageNotFoundError(NotFoundKind.IMAGE, "sun")
        assert str(err) == "Image not found: sun"
        assert err.variant_fragment is None

    def test_not_found_variant_message(self) -> None:
        err = ImageNotFoundError(NotFoundKind.VARIANT, "sun", "poster")
        assert str(err) == "Image not found: sun/poster"
        assert err.kind.value == "variant"

    def test_hierarchy(self) -> None:
        for cls in (ProviderError, FetchError, CacheCorruptError):
            assert issubclass(cls, HosutoError)
        assert isinstance(ImageNotFoundError(NotFoundKind.IMAGE, "x"), HosutoError)
