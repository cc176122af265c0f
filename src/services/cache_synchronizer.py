"""Cache synchronizer: yields the image directory for each request.

Orchestrates the directory fetcher, the staleness policy and the key-value
store.  The store holds two records that always move together:

    <directory_key>   JSON array of images (see src/models/image.py)
    <timestamp_key>   ISO-8601 time of the refresh that wrote it

On a fresh snapshot the directory is read back from the store.  On a stale
one (or no snapshot at all) the full directory is fetched from the provider
and both records are rewritten.  This class is the only writer of the store.

Concurrent stale-path requests within one process share a single in-flight
refresh.  Requests in other processes may still refresh at the same time;
the writes are idempotent and the last writer wins.
"""

from __future__ import annotations

import asyncio

import structlog
from pydantic import ValidationError

from src.interfaces.cache_provider import ICacheProvider
from src.models.image import IMAGE_DIRECTORY_ADAPTER, Image, RefreshResult, dump_directory
from src.services.directory_fetcher import DirectoryFetcher
from src.services.staleness import StalenessPolicy, format_timestamp
from src.utils.errors import CacheCorruptError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

DIRECTORY_KEY = "KV_CACHE"
TIMESTAMP_KEY = "KV_LAST_UPDATED"


class CacheSynchronizer:
    """Produces a directory snapshot, refreshing the cache when stale."""

    def __init__(
        self,
        fetcher: DirectoryFetcher,
        store: ICacheProvider,
        policy: StalenessPolicy,
        account_id: str,
        *,
        directory_key: str = DIRECTORY_KEY,
        timestamp_key: str = TIMESTAMP_KEY,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._policy = policy
        self._account_id = account_id
        self._directory_key = directory_key
        self._timestamp_key = timestamp_key
        self._inflight: asyncio.Task[RefreshResult] | None = None

    @property
    def policy(self) -> StalenessPolicy:
        return self._policy

    @property
    def directory_key(self) -> str:
        return self._directory_key

    @property
    def timestamp_key(self) -> str:
        return self._timestamp_key

    async def resolve_directory(self) -> list[Image]:
        """Return the directory for the current request.

        Raises
        ------
        src.utils.errors.ProviderError
            If a refresh was needed and the provider listing failed.  The
            store is left untouched in that case.
        """
        last_updated = await self._store.get(self._timestamp_key)

        if self._policy.is_stale(last_updated):
            _logger.info("cache_stale", last_updated=last_updated)
            result = await self._join_refresh()
            return result.directory

        try:
            return await self._load_directory()
        except CacheCorruptError as exc:
            _logger.warning("cache_corrupt", key=self._directory_key, error=str(exc))
            return []

    async def force_refresh(self) -> RefreshResult:
        """Rebuild the cache unconditionally, bypassing the staleness check."""
        _logger.info("cache_forced_refresh")
        return await self._refresh()

    # -- Private helpers -------------------------------------------------------

    async def _join_refresh(self) -> RefreshResult:
        """Run a refresh, or wait on the one already in flight."""
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._refresh())
        else:
            _logger.debug("cache_refresh_joined")
        # shield: one cancelled request must not cancel the refresh for others.
        return await asyncio.shield(self._inflight)

    async def _refresh(self) -> RefreshResult:
        directory = await self._fetcher.fetch_all(self._account_id)
        serialized = dump_directory(directory)
        updated = format_timestamp(self._policy.now())

        # Both records are written together; neither is skipped if the
        # other fails.
        results = await asyncio.gather(
            self._store.put(self._directory_key, serialized),
            self._store.put(self._timestamp_key, updated),
            return_exceptions=True,
        )
        for outcome in results:
            if isinstance(outcome, BaseException):
                raise outcome

        result = RefreshResult(
            directory=directory,
            updated=updated,
            size_bytes=len(serialized),
        )
        _logger.info(
            "cache_refreshed",
            updated=updated,
            images=len(directory),
            size_mib=result.size_mib,
        )
        return result

    async def _load_directory(self) -> list[Image]:
        raw = await self._store.get(self._directory_key)
        if raw is None:
            _logger.warning("cache_directory_missing", key=self._directory_key)
            return []
        try:
            return IMAGE_DIRECTORY_ADAPTER.validate_json(raw)
        except ValidationError as exc:
            raise CacheCorruptError(
                message=f"{exc.error_count()} validation errors in cached directory",
                provider_name=self._store.get_provider_name(),
            ) from exc
