"""Abstract base class for image-hosting providers.

Defines the contract for listing a hosted image library one page at a time
and for retrieving the bytes of a single rendition.  The directory fetcher
and the delivery assembler depend only on this interface, so the hosting
backend can be swapped without touching resolution logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx

from src.models.image import ImageListPage


class IImageProvider(ABC):
    """Contract for remote image-hosting services."""

    @abstractmethod
    async def list_images(
        self, account_id: str, continuation_token: str | None = None
    ) -> ImageListPage:
        """Return one page of the account's image listing.

        Parameters
        ----------
        account_id:
            Provider account that owns the images.
        continuation_token:
            Cursor returned by the previous page, or ``None`` for the first
            page.

        Returns
        -------
        ImageListPage
            The page's images and, when more pages remain, the token for the
            next one.

        Raises
        ------
        src.utils.errors.ProviderError
            If the page cannot be retrieved or parsed.
        """

    @abstractmethod
    async def fetch_rendition(self, url: str) -> httpx.Response:
        """Open a streamed GET request for a rendition URL.

        The returned response has not had its body read.  The caller owns
        it and must ``aclose()`` it once the body has been consumed.

        Raises
        ------
        src.utils.errors.FetchError
            If the request cannot be made.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured and usable."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"cloudflare_images"``."""
