"""Abstract base class for the key-value cache store.

The store is an opaque string-to-string surface.  hosuto keeps exactly two
records in it (the serialized image directory and the last-refresh
timestamp); the cache synchronizer decides what goes in them and when.
Implementations may use SQLite, an in-process dict, Redis, or any other
backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ICacheProvider(ABC):
    """Contract for key-value string stores.

    All operations are async so that network-backed stores do not block
    the event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under *key*, or ``None`` if absent."""

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value.

        Parameters
        ----------
        key:
            The record name.
        value:
            The string to store.  No size or format constraint is imposed
            by the interface.
        """

    async def initialize(self) -> None:
        """Prepare the backing storage.  The default does nothing."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"sqlite_kv"``."""
