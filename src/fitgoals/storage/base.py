# src/fitgoals/storage/base.py
"""
Abstract Base Class for blob storage backends.

A blob storage backend persists whole collections under string keys. It
knows nothing about goals or progress records: a collection is a list of
JSON-compatible dictionaries, written and read as a single unit.
"""

import abc
from typing import Any, Dict, List, Sequence

Collection = List[Dict[str, Any]]


class BlobStorage(abc.ABC):
    """
    Abstract Base Class for keyed collection storage.

    Implementations must make ``save`` all-or-nothing: after a failed save
    a subsequent ``retrieve`` returns the previously saved collection.
    """

    @abc.abstractmethod
    async def save(self, key: str, collection: Collection) -> None:
        """
        Replace the collection stored under ``key``.

        Args:
            key: Storage key.
            collection: The full collection to persist.

        Raises:
            StorageError: If the collection cannot be serialized or written.
        """
        pass

    @abc.abstractmethod
    async def retrieve(self, key: str) -> Collection:
        """
        Load the collection stored under ``key``.

        Args:
            key: Storage key.

        Returns:
            The stored collection, or an empty list if nothing was stored
            under ``key`` yet. An absent key is never an error.

        Raises:
            StorageError: If the stored data cannot be read or decoded.
        """
        pass

    def check_keys(self, keys: Sequence[str]) -> None:
        """
        Reject a set of keys that this backend cannot keep apart.

        Raises:
            ConfigError: If two distinct keys would share storage.
        """
        pass

    async def close(self) -> None:
        """Release backend resources. The default implementation does nothing."""
        pass
