# src/fitgoals/storage/__init__.py
"""
Persistence boundary for fitgoals.

Exposes the abstract ``BlobStorage`` interface and its concrete backends,
plus ``create_blob_storage`` which selects a backend from configuration.
"""

import logging

from ..config.models import StorageConfig
from ..exceptions import ConfigError
from .base import BlobStorage, Collection
from .json_file import JsonFileBlobStorage
from .memory import MemoryBlobStorage


def create_blob_storage(config: StorageConfig, logger: logging.Logger) -> BlobStorage:
    """
    Build the blob storage backend named by ``config.backend``.

    Raises:
        ConfigError: If the backend name is unknown.
    """
    if config.backend == "json":
        return JsonFileBlobStorage(config.path, logger=logger)
    if config.backend == "memory":
        return MemoryBlobStorage(logger=logger)
    raise ConfigError(f"Unknown storage backend '{config.backend}'.")


__all__ = [
    "BlobStorage",
    "Collection",
    "JsonFileBlobStorage",
    "MemoryBlobStorage",
    "create_blob_storage",
]
