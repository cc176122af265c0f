"""Custom exception hierarchy for hosuto.

All application exceptions inherit from :class:`HosutoError`, which carries
an optional ``provider_name`` so error handlers can identify which external
service (e.g. "cloudflare_images", "sqlite_kv") caused the failure.

The hierarchy is organized by request stage:

    HosutoError  (base -- catch-all for any hosuto error)
    +-- ProviderError        (image listing / pagination failure)
    +-- FetchError           (rendition byte retrieval failure)
    +-- ImageNotFoundError   (no image or no variant matched the request)
    +-- CacheCorruptError    (stored directory could not be deserialized)
    +-- ConfigurationError   (startup / missing config)

Only :class:`ImageNotFoundError` has a user-facing shape (a plain-text 404).
:class:`CacheCorruptError` is raised and caught inside the cache layer and is
never allowed to reach a request handler.
"""

from __future__ import annotations

from enum import Enum


class HosutoError(Exception):
    """Base exception for all hosuto errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[cloudflare_images] HTTP 403``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Upstream errors
# ---------------------------------------------------------------------------

class ProviderError(HosutoError):
    """Raised when a directory listing page cannot be retrieved or parsed.

    A failure on any page aborts the whole fetch; nothing is committed to
    the cache store.
    """

    def __init__(
        self,
        message: str = "Image provider listing failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class FetchError(HosutoError):
    """Raised when the bytes of a rendition cannot be retrieved."""

    def __init__(
        self,
        message: str = "Rendition fetch failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Resolution errors
# ---------------------------------------------------------------------------

class NotFoundKind(str, Enum):  # noqa: UP042
    """Which half of a ``<image>/<variant>`` request failed to match."""

    IMAGE = "image"
    VARIANT = "variant"


class ImageNotFoundError(HosutoError):
    """Raised when the resolver finds no image, or no variant of an image.

    Carries the fragments exactly as requested so the 404 body can echo
    them back to the caller.
    """

    def __init__(
        self,
        kind: NotFoundKind,
        image_fragment: str,
        variant_fragment: str | None = None,
    ) -> None:
        self._kind = kind
        self._image_fragment = image_fragment
        self._variant_fragment = variant_fragment
        if kind is NotFoundKind.VARIANT:
            message = f"Image not found: {image_fragment}/{variant_fragment}"
        else:
            message = f"Image not found: {image_fragment}"
        super().__init__(message=message)

    @property
    def kind(self) -> NotFoundKind:
        return self._kind

    @property
    def image_fragment(self) -> str:
        return self._image_fragment

    @property
    def variant_fragment(self) -> str | None:
        return self._variant_fragment


# ---------------------------------------------------------------------------
# Cache / configuration errors
# ---------------------------------------------------------------------------

class CacheCorruptError(HosutoError):
    """Raised when the stored image directory is not valid JSON of images."""

    def __init__(
        self,
        message: str = "Cached image directory is corrupt",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(HosutoError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
