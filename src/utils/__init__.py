"""Utility modules for hosuto.

- **errors** -- Exception hierarchy rooted at HosutoError; each request
  stage raises its own subclass so handlers can map failures to a status
  code without broad ``except Exception`` blocks.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

# -- Exception hierarchy ---------------------------------------------------
from src.utils.errors import (
    CacheCorruptError,
    ConfigurationError,
    FetchError,
    HosutoError,
    ImageNotFoundError,
    NotFoundKind,
    ProviderError,
)

# -- Structured logging ----------------------------------------------------
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "CacheCorruptError",
    "ConfigurationError",
    "FetchError",
    "HosutoError",
    "ImageNotFoundError",
    "NotFoundKind",
    "ProviderError",
    "configure_logging",
    "get_logger",
]
