"""Fetches the complete image directory from the hosting provider.

Walks the provider's cursor-paginated listing until no continuation token
is returned and concatenates the pages in the order they were received.
A failure on any page aborts the walk; the caller never sees a partial
directory.
"""

from __future__ import annotations

import structlog

from src.interfaces.image_provider import IImageProvider
from src.models.image import Image
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


class DirectoryFetcher:
    """Builds a full image directory from paginated listing calls."""

    def __init__(self, provider: IImageProvider) -> None:
        self._provider = provider

    async def fetch_all(self, account_id: str) -> list[Image]:
        """Return every image in *account_id*, earlier pages first.

        Raises
        ------
        src.utils.errors.ProviderError
            Propagated unchanged from the first page that fails.
        """
        directory: list[Image] = []
        token: str | None = None
        pages = 0

        while True:
            page = await self._provider.list_images(account_id, continuation_token=token)
            directory.extend(page.images)
            pages += 1
            _logger.debug("directory_page_fetched", page=pages, images=len(page.images))

            token = page.continuation_token
            if not token:
                break

        _logger.info(
            "directory_fetched",
            provider=self._provider.get_provider_name(),
            pages=pages,
            images=len(directory),
        )
        return directory
