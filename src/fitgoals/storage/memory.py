# src/fitgoals/storage/memory.py
"""
In-memory blob storage.

Keeps deep copies of saved collections in a dictionary. Useful for tests
and for ephemeral sessions that should not touch the filesystem. An
optional delay makes every call suspend, which mimics a slow device.
"""

import asyncio
import copy
import logging
from typing import Dict, List

from .base import BlobStorage, Collection


class MemoryBlobStorage(BlobStorage):
    """
    Dictionary-backed storage.

    Args:
        logger: Logger used for storage diagnostics.
        delay: Seconds every ``save``/``retrieve`` call sleeps before completing.
    """

    def __init__(self, logger: logging.Logger, delay: float = 0.0) -> None:
        self._logger = logger
        self._delay = delay
        self._data: Dict[str, Collection] = {}

    async def save(self, key: str, collection: Collection) -> None:
        snapshot = copy.deepcopy(collection)
        await asyncio.sleep(self._delay)
        self._data[key] = snapshot
        self._logger.debug("Saved %d items under '%s' (memory)", len(snapshot), key)

    async def retrieve(self, key: str) -> Collection:
        await asyncio.sleep(self._delay)
        return copy.deepcopy(self._data.get(key, []))

    def keys(self) -> List[str]:
        """Keys that currently hold a collection."""
        return list(self._data)
