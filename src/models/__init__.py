"""hosuto domain models -- re-exports the public model classes."""

from __future__ import annotations

from src.models.image import (
    IMAGE_DIRECTORY_ADAPTER,
    Image,
    ImageListPage,
    RefreshResult,
    Resolution,
    dump_directory,
)

__all__ = [
    "IMAGE_DIRECTORY_ADAPTER",
    "Image",
    "ImageListPage",
    "RefreshResult",
    "Resolution",
    "dump_directory",
]
