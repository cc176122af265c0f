"""Delivery assembler: streams a resolved rendition back to the caller.

The upstream status code, headers and body are passed through; the
body is streamed chunk by chunk and never buffered.  Hop-by-hop headers
are dropped, and four headers are set, replacing any upstream value:

    Content-Disposition   inline; filename="<image filename>" (plus filename*
                          for non-ASCII names)
    Cache-Control         public, max-age=<90 days>
    X-Original-Url        the rendition URL that was fetched
    X-Image-Id            the provider id of the image
"""

from __future__ import annotations

from urllib.parse import quote

import structlog
from starlette.background import BackgroundTask
from starlette.responses import StreamingResponse

from src.interfaces.image_provider import IImageProvider
from src.models.image import Resolution
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

DEFAULT_MAX_AGE = 90 * 24 * 60 * 60

# Connection-level headers belong to the upstream hop, not to our response.
_HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)


class DeliveryAssembler:
    """Turns a :class:`Resolution` into a streamed HTTP response."""

    def __init__(self, provider: IImageProvider, max_age: int = DEFAULT_MAX_AGE) -> None:
        self._provider = provider
        self._max_age = max_age
        self._cache_control = f"public, max-age={max_age}"

    @property
    def max_age(self) -> int:
        return self._max_age

    async def deliver(self, resolution: Resolution) -> StreamingResponse:
        """Fetch the rendition and wrap it with delivery headers.

        Raises
        ------
        src.utils.errors.FetchError
            If the upstream request cannot be made.
        """
        upstream = await self._provider.fetch_rendition(resolution.url)

        headers = {
            name: value
            for name, value in upstream.headers.items()
            if name.lower() not in _HOP_BY_HOP
        }
        headers.update(self.delivery_headers(resolution))

        _logger.info(
            "image_delivered",
            image_id=resolution.image.id,
            url=resolution.url,
            upstream_status=upstream.status_code,
        )

        # Raw bytes keep Content-Encoding/Content-Length consistent with
        # what upstream sent.  The upstream response is closed once the
        # body has been sent.
        return StreamingResponse(
            upstream.aiter_raw(),
            status_code=upstream.status_code,
            headers=headers,
            background=BackgroundTask(upstream.aclose),
        )

    def delivery_headers(self, resolution: Resolution) -> dict[str, str]:
        return {
            "content-disposition": content_disposition(resolution.image.filename),
            "cache-control": self._cache_control,
            "x-original-url": resolution.url,
            "x-image-id": resolution.image.id,
        }


def content_disposition(filename: str) -> str:
    """``inline`` disposition for *filename*, safe for a Latin-1 header.

    Names outside ASCII get an RFC 5987 ``filename*`` parameter next to an
    ASCII fallback.
    """
    fallback = filename.encode("ascii", "replace").decode("ascii")
    fallback = fallback.replace("\\", "\\\\").replace('"', '\\"')
    if filename.isascii():
        return f'inline; filename="{fallback}"'
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
