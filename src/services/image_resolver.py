"""Resolves a requested ``<image>/<variant>`` pair against a directory.

Image matching is by prefix on either the filename or the provider id, and
the first record in directory order wins regardless of which of the two
matched.  Variant matching is a plain suffix test on each variant URL, in
the image's own variant order.  The suffix test is loose:
``"lic"`` matches a URL ending in ``/public``.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from src.models.image import Image, Resolution
from src.utils.errors import ImageNotFoundError, NotFoundKind
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

DEFAULT_VARIANT = "public"


class ImageResolver:
    """Finds the rendition URL for a name fragment and a variant fragment."""

    def __init__(self, default_variant: str = DEFAULT_VARIANT) -> None:
        self._default_variant = default_variant

    @property
    def default_variant(self) -> str:
        return self._default_variant

    def resolve(
        self,
        directory: Sequence[Image],
        name_fragment: str,
        variant_fragment: str | None = None,
    ) -> Resolution:
        """Return the matched image and rendition URL.

        Raises
        ------
        ImageNotFoundError
            ``kind=IMAGE`` when no record matches *name_fragment*;
            ``kind=VARIANT`` when the image matched but none of its variant
            URLs ends with *variant_fragment*.
        """
        variant = variant_fragment or self._default_variant

        image = find_image(directory, name_fragment)
        if image is None:
            _logger.info("image_not_found", image=name_fragment, directory_size=len(directory))
            raise ImageNotFoundError(NotFoundKind.IMAGE, name_fragment)

        url = find_variant(image, variant)
        if url is None:
            _logger.info("variant_not_found", image=name_fragment, variant=variant, image_id=image.id)
            raise ImageNotFoundError(NotFoundKind.VARIANT, name_fragment, variant)

        return Resolution(image=image, url=url)


def find_image(directory: Sequence[Image], name_fragment: str) -> Image | None:
    """First image whose filename or id starts with *name_fragment*."""
    return next(
        (
            img
            for img in directory
            if img.filename.startswith(name_fragment) or img.id.startswith(name_fragment)
        ),
        None,
    )


def find_variant(image: Image, variant_fragment: str) -> str | None:
    """First variant URL of *image* that ends with *variant_fragment*."""
    return next((url for url in image.variants if url.endswith(variant_fragment)), None)
