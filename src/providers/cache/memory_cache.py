"""In-memory key-value store using cachetools.LRUCache.

Process-local and lost on restart, so every cold start is a stale cache.
Suitable for development and tests; production uses the SQLite store.
"""

from __future__ import annotations

import structlog
from cachetools import LRUCache

from src.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """In-memory string store backed by ``cachetools.LRUCache``.

    Parameters
    ----------
    max_size:
        Maximum number of records before the least-recently-used one is
        evicted.  hosuto only writes two keys, so the default never evicts.
    """

    def __init__(self, max_size: int = 64) -> None:
        self._cache: LRUCache[str, str] = LRUCache(maxsize=max_size)

    async def get(self, key: str) -> str | None:
        value = self._cache.get(key)
        if value is not None:
            logger.debug("kv_hit", key=key)
        else:
            logger.debug("kv_miss", key=key)
        return value

    async def put(self, key: str, value: str) -> None:
        self._cache[key] = value
        logger.debug("kv_put", key=key, size=len(value))

    def get_provider_name(self) -> str:
        return "memory_kv"
