"""hosuto FastAPI application entry point.

Wires together the provider, cache store, and services via dependency
injection.  Loads configuration from ``.env`` and ``config/config.yaml``,
configures structured logging, and exposes ``create_app()`` plus a
module-level ``app`` for uvicorn.

``build_services`` is also used by the operator CLI (src/cli) to run the
same synchronizer outside the web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from src.api.routes import router
from src.config.loader import load_config
from src.config.settings import Settings
from src.interfaces.cache_provider import ICacheProvider
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.providers.cache.sqlite_cache import SQLiteCacheProvider
from src.providers.images.cloudflare_provider import CloudflareImagesProvider
from src.services.cache_synchronizer import CacheSynchronizer
from src.services.delivery import DeliveryAssembler
from src.services.directory_fetcher import DirectoryFetcher
from src.services.image_resolver import ImageResolver
from src.services.staleness import StalenessPolicy
from src.utils.errors import ConfigurationError
from src.utils.logging import configure_logging, get_logger

_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component assembly
# ---------------------------------------------------------------------------


def _build_cache_store(app_settings: Settings) -> ICacheProvider:
    """Select the key-value backend named by ``KV_BACKEND``."""
    backend = app_settings.kv_backend.lower()
    if backend == "sqlite":
        return SQLiteCacheProvider(db_path=app_settings.kv_db_path)
    if backend == "memory":
        return MemoryCacheProvider()
    raise ConfigurationError(message=f"Unknown KV_BACKEND: {app_settings.kv_backend!r}")


def build_services(
    app_settings: Settings,
    app_config: dict[str, Any],
    http_client: httpx.AsyncClient,
) -> dict[str, Any]:
    """Construct the provider, store, and services around *http_client*.

    Returns a flat dict of named components.
    """
    cache_cfg = app_config.get("cache", {})
    delivery_cfg = app_config.get("delivery", {})

    provider = CloudflareImagesProvider(settings=app_settings, http_client=http_client)
    store = _build_cache_store(app_settings)
    policy = StalenessPolicy(threshold=timedelta(hours=cache_cfg.get("staleness_hours", 24)))

    synchronizer = CacheSynchronizer(
        fetcher=DirectoryFetcher(provider),
        store=store,
        policy=policy,
        account_id=app_settings.cloudflare_account_id,
        directory_key=cache_cfg.get("directory_key", "KV_CACHE"),
        timestamp_key=cache_cfg.get("timestamp_key", "KV_LAST_UPDATED"),
    )
    resolver = ImageResolver(default_variant=delivery_cfg.get("default_variant", "public"))
    assembler = DeliveryAssembler(
        provider=provider,
        max_age=delivery_cfg.get("max_age_seconds", 7776000),
    )

    return {
        "provider": provider,
        "cache_store": store,
        "synchronizer": synchronizer,
        "resolver": resolver,
        "assembler": assembler,
    }


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every component for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    http_client = httpx.AsyncClient(timeout=app_settings.http_timeout)
    components = build_services(app_settings, app_config, http_client)
    components["http_client"] = http_client
    components["redirect_url"] = app_config.get("app", {}).get(
        "redirect_url", "https://github.com/tycrek/hosuto"
    )
    return components


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise components on startup, close the HTTP client on shutdown."""
    components = _build_all(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["cache_store"].initialize()

    provider: CloudflareImagesProvider = components["provider"]
    if not provider.is_available():
        _logger.warning(
            "provider_not_configured",
            provider=provider.get_provider_name(),
            msg="CLOUDFLARE_API_KEY / CLOUDFLARE_ACCOUNT_ID missing; refreshes will fail.",
        )

    _logger.info(
        "app_startup",
        version=_VERSION,
        environment=settings.app_env,
        provider=provider.get_provider_name(),
        cache_store=components["cache_store"].get_provider_name(),
    )

    yield

    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="hosuto",
        version=_VERSION,
        description=(
            "Serve Cloudflare Images by filename or id prefix and variant name, "
            "backed by a locally cached image directory."
        ),
        lifespan=_lifespan,
        redirect_slashes=False,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)

    application.include_router(router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
