"""Image directory models for hosuto.

Defines the Pydantic v2 models for a single hosted image, one page of the
provider's listing, a resolver hit, and the outcome of a cache refresh.
All models use frozen config: a directory is never mutated in place, only
replaced as a whole.

Relationships:
    - ImageListPage carries one page of Image records plus the cursor for
      the next page (src/services/directory_fetcher.py walks these)
    - A directory is simply ``list[Image]``; IMAGE_DIRECTORY_ADAPTER
      serializes it for the cache store and reads it back
    - Resolution pairs the matched Image with one of its variant URLs
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class Image(BaseModel):
    """A single image as listed by the hosting provider.

    Only ``id``, ``filename`` and ``variants`` drive resolution.  The
    remaining fields are carried through so that a directory read back from
    the cache is identical to the one that was fetched.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    filename: str = ""
    # Full delivery URLs; the last path segment names the variant
    # (".../public", ".../thumbnail").
    variants: list[str] = Field(default_factory=list)
    uploaded: datetime | None = None
    require_signed_urls: bool = Field(default=False, alias="requireSignedURLs")
    meta: dict[str, Any] = Field(default_factory=dict)


class ImageListPage(BaseModel):
    """One page of the provider's paginated image listing."""

    model_config = ConfigDict(frozen=True)

    images: list[Image] = Field(default_factory=list)
    continuation_token: str | None = None


class Resolution(BaseModel):
    """A resolved ``<image>/<variant>`` request."""

    model_config = ConfigDict(frozen=True)

    image: Image
    url: str


class RefreshResult(BaseModel):
    """Outcome of a cache refresh: the new directory and what was stored."""

    model_config = ConfigDict(frozen=True)

    directory: list[Image]
    # ISO-8601 timestamp written to the cache store alongside the directory.
    updated: str
    # Length of the serialized directory as written to the store.
    size_bytes: int

    @property
    def size_mib(self) -> str:
        """Serialized size in MiB with two decimals, e.g. ``"0.04"``."""
        return f"{self.size_bytes / 1024 / 1024:.2f}"


IMAGE_DIRECTORY_ADAPTER: TypeAdapter[list[Image]] = TypeAdapter(list[Image])


def dump_directory(directory: list[Image]) -> str:
    """Serialize *directory* to the JSON array stored in the cache."""
    return IMAGE_DIRECTORY_ADAPTER.dump_json(
        directory, by_alias=True, exclude_none=True
    ).decode("utf-8")
