"""Public interface definitions for hosuto's external services.

Every external service is accessed through the abstract base classes in
this package.  Concrete adapters implement them and are injected at
startup in ``src/main.py``, so tests can substitute a mock or an in-memory
adapter without network access.

CONCRETE PROVIDER MAP:
    Interface        ->  Concrete implementations (in src/providers/)
    ------------------------------------------------------------------
    IImageProvider   ->  CloudflareImagesProvider
    ICacheProvider   ->  SQLiteCacheProvider, MemoryCacheProvider
"""

from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.image_provider import IImageProvider

__all__ = ["ICacheProvider", "IImageProvider"]
