# src/fitgoals/storage/json_file.py
"""
JSON file-based blob storage.

Each key is stored as a separate JSON file in a configured directory.
Writes go to a temporary file which is then renamed over the target, so a
failed or interrupted write never leaves a half-written collection behind.
It uses aiofiles for asynchronous file operations.
"""

import json
import logging
import os
import pathlib
import re
from typing import Dict, Sequence

import aiofiles
import aiofiles.os as aios

from ..exceptions import ConfigError, StorageError
from .base import BlobStorage, Collection


def _file_stem(key: str) -> str:
    return re.sub(r"[^\w\-.]", "_", key)


class JsonFileBlobStorage(BlobStorage):
    """
    Persists each keyed collection as ``<directory>/<key>.json``.

    Args:
        directory: Directory holding the collection files. Created on first write.
        logger: Logger used for storage diagnostics.
    """

    _file_extension = ".json"

    def __init__(self, directory: str, logger: logging.Logger) -> None:
        self._directory = pathlib.Path(os.path.expanduser(directory))
        self._logger = logger

    @property
    def directory(self) -> pathlib.Path:
        return self._directory

    def _get_path(self, key: str) -> pathlib.Path:
        """Constructs the file path for a storage key."""
        return self._directory / f"{_file_stem(key)}{self._file_extension}"

    def check_keys(self, keys: Sequence[str]) -> None:
        """Keys whose sanitized file names coincide would share one file."""
        seen: Dict[str, str] = {}
        for key in keys:
            stem = _file_stem(key)
            if stem in seen and seen[stem] != key:
                raise ConfigError(
                    f"Storage keys '{seen[stem]}' and '{key}' map to the same file '{stem}{self._file_extension}'."
                )
            seen[stem] = key

    async def save(self, key: str, collection: Collection) -> None:
        path = self._get_path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            payload = json.dumps({"key": key, "items": collection}, indent=2)
        except (TypeError, ValueError) as e:
            self._logger.error("Error serializing collection '%s': %s", key, e)
            raise StorageError(f"Failed to serialize collection '{key}': {e}", operation="save", key=key)

        try:
            await aios.makedirs(self._directory, exist_ok=True)
            async with aiofiles.open(tmp_path, mode="w", encoding="utf-8") as f:
                await f.write(payload)
            await aios.replace(tmp_path, path)
        except OSError as e:
            self._logger.error("Error writing collection '%s' to %s: %s", key, path, e)
            raise StorageError(f"Failed to write collection '{key}': {e}", operation="save", key=key)

        self._logger.debug("Saved %d items under '%s' to %s", len(collection), key, path)

    async def retrieve(self, key: str) -> Collection:
        path = self._get_path(key)
        try:
            if not await aios.path.exists(path):
                self._logger.debug("No stored collection for '%s' at %s", key, path)
                return []
            async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            self._logger.error("Error reading collection '%s' from %s: %s", key, path, e)
            raise StorageError(f"Failed to read collection '{key}': {e}", operation="retrieve", key=key)

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            self._logger.error("Error decoding JSON for collection '%s' from %s: %s", key, path, e)
            raise StorageError(f"Corrupted collection file for '{key}': {e}", operation="retrieve", key=key)

        if not isinstance(data, dict) or data.get("key") != key:
            stored_key = data.get("key") if isinstance(data, dict) else None
            self._logger.error("File %s holds collection '%s', expected '%s'", path, stored_key, key)
            raise StorageError(
                f"Collection file for '{key}' belongs to key '{stored_key}'", operation="retrieve", key=key
            )
        items = data.get("items")
        if not isinstance(items, list):
            raise StorageError(f"Collection file for '{key}' has no item list", operation="retrieve", key=key)
        return items
