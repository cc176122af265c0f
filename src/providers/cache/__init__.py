"""Key-value cache store adapters.

SQLiteCacheProvider persists the image directory and its refresh timestamp
across restarts and is the production default.  MemoryCacheProvider is a
process-local dict, used in development and tests.  Either can be swapped
for another ICacheProvider without touching the synchronizer.
"""

from src.providers.cache.memory_cache import MemoryCacheProvider
from src.providers.cache.sqlite_cache import SQLiteCacheProvider

__all__ = ["MemoryCacheProvider", "SQLiteCacheProvider"]
