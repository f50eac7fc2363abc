# src/fitgoals/store.py
"""
Goal and progress persistence with per-collection write serialization.

The store owns two collections, goals and progress records, each persisted
as a whole under its own storage key. Every mutation is a
read-transform-write of the entire collection performed while holding that
collection's lock, so writers to one collection form a total order while
writers to the other collection proceed independently.

Readers never take part in that ordering: they see the last committed
snapshot, which is only replaced after the backend accepted the new
collection. A failed write therefore leaves both the stored data and the
in-memory view at the previous state.

Example:
    store = GoalProgressStore(MemoryBlobStorage(logger), logger)
    await store.save_goal(goal)
    await store.save_progress(ProgressRecord(goal_id=goal.id, value=5.0))
    records = await store.get_progress(ProgressWindow(start, end))
"""

import asyncio
import logging
from typing import Callable, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .config.models import DEFAULT_GOALS_KEY, DEFAULT_PROGRESS_KEY
from .exceptions import ConfigError, StorageError
from .models import Goal, ProgressRecord, ProgressWindow
from .storage.base import BlobStorage

GOALS_KEY = DEFAULT_GOALS_KEY
PROGRESS_KEY = DEFAULT_PROGRESS_KEY

ItemT = TypeVar("ItemT", bound=BaseModel)

# A transform receives the committed items and returns the replacement
# items, or None when nothing needs to be written.
Transform = Callable[[Tuple[ItemT, ...]], Optional[List[ItemT]]]


def _consume_result(task: "asyncio.Task") -> None:
    # Writes outlive cancelled callers; their errors are already logged.
    if not task.cancelled():
        task.exception()


class _GuardedCollection(Generic[ItemT]):
    """One persisted collection, its lock and its last committed snapshot."""

    def __init__(
        self,
        label: str,
        key: str,
        model: Type[ItemT],
        storage: BlobStorage,
        logger: logging.Logger,
    ) -> None:
        self.label = label
        self.key = key
        self._model = model
        self._storage = storage
        self._logger = logger
        self._lock = asyncio.Lock()
        self._committed: Optional[Tuple[ItemT, ...]] = None

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    async def _load(self) -> Tuple[ItemT, ...]:
        raw = await self._storage.retrieve(self.key)
        try:
            return tuple(self._model.model_validate(item) for item in raw)
        except ValidationError as e:
            raise StorageError(
                f"Stored {self.label} collection '{self.key}' is invalid: {e}",
                operation="retrieve",
                key=self.key,
            ) from e

    async def snapshot(self) -> Tuple[ItemT, ...]:
        """Last committed items, loading them from storage on first use."""
        committed = self._committed
        if committed is not None:
            return committed
        async with self._lock:
            if self._committed is None:
                self._committed = await self._load()
            return self._committed

    def invalidate(self) -> None:
        self._committed = None

    async def mutate(self, operation: str, item_id: str, transform: Transform) -> bool:
        """
        Apply ``transform`` under the collection lock and persist the result.

        The write runs in its own task shielded from the caller: cancelling
        the caller abandons the result, never the write.

        Returns:
            True if a new collection was written, False if the transform was a no-op.
        """
        task = asyncio.ensure_future(self._mutate_locked(operation, item_id, transform))
        task.add_done_callback(_consume_result)
        return await asyncio.shield(task)

    async def _mutate_locked(self, operation: str, item_id: str, transform: Transform) -> bool:
        async with self._lock:
            try:
                current = self._committed if self._committed is not None else await self._load()
                self._committed = current
                updated = transform(current)
                if updated is None:
                    return False
                await self._storage.save(self.key, [item.model_dump(mode="json") for item in updated])
            except StorageError as e:
                self._logger.error("Failed to %s: %s, error: %s", operation, item_id, e)
                raise
            except Exception as e:
                self._logger.error(
                    "Failed to %s: %s, error: %s", operation, item_id, e, exc_info=True
                )
                raise StorageError(
                    f"Unexpected error during {operation} for '{item_id}': {e}",
                    operation=operation,
                    key=self.key,
                ) from e
            self._committed = tuple(updated)
            return True


def _upsert(item: ItemT) -> Transform:
    def transform(current: Tuple[ItemT, ...]) -> List[ItemT]:
        updated = [existing for existing in current if existing.id != item.id]
        updated.append(item)
        return updated

    return transform


class GoalProgressStore:
    """
    The single owner of the goal and progress record collections.

    Thread Safety:
        Goal mutations are serialized by one asyncio lock and progress
        mutations by another. No operation holds both, so the collections
        never block each other and no cross-collection atomicity exists.

    Args:
        storage: Blob storage backend.
        logger: Logger for operation outcomes.
        goals_key: Storage key of the goal collection.
        progress_key: Storage key of the progress collection.

    Raises:
        ConfigError: If both keys are equal, or the backend would store
            them in the same place.
    """

    def __init__(
        self,
        storage: BlobStorage,
        logger: logging.Logger,
        goals_key: str = GOALS_KEY,
        progress_key: str = PROGRESS_KEY,
    ) -> None:
        if goals_key == progress_key:
            raise ConfigError(
                f"Goal and progress collections must use different storage keys (got '{goals_key}')."
            )
        storage.check_keys([goals_key, progress_key])
        self._storage = storage
        self._logger = logger
        self._goals: _GuardedCollection[Goal] = _GuardedCollection(
            "goal", goals_key, Goal, storage, logger
        )
        self._progress: _GuardedCollection[ProgressRecord] = _GuardedCollection(
            "progress", progress_key, ProgressRecord, storage, logger
        )

    @property
    def goals_key(self) -> str:
        return self._goals.key

    @property
    def progress_key(self) -> str:
        return self._progress.key

    # ----- goals --------------------------------------------------------------

    async def save_goal(self, goal: Goal) -> None:
        """Insert or replace ``goal`` (matched by id)."""
        await self._goals.mutate("save goal", goal.id, _upsert(goal))
        self._logger.info("Saved goal: %s", goal.id)

    async def get_all_goals(self) -> List[Goal]:
        """All goals in insertion order."""
        return list(await self._read(self._goals, "load goals"))

    async def get_goal(self, goal_id: str) -> Optional[Goal]:
        for goal in await self._read(self._goals, "get goal"):
            if goal.id == goal_id:
                return goal
        return None

    async def delete_goal(self, goal_id: str) -> None:
        """
        Remove the goal with ``goal_id``. Unknown ids are a no-op.

        Progress records of the goal are kept; use
        ``delete_progress_for_goal`` to remove them separately.
        """

        def transform(current: Tuple[Goal, ...]) -> Optional[List[Goal]]:
            if not any(goal.id == goal_id for goal in current):
                return None
            return [goal for goal in current if goal.id != goal_id]

        if await self._goals.mutate("delete goal", goal_id, transform):
            self._logger.info("Deleted goal: %s", goal_id)
        else:
            self._logger.debug("Delete of unknown goal ignored: %s", goal_id)

    # ----- progress -----------------------------------------------------------

    async def save_progress(self, record: ProgressRecord) -> None:
        """Insert or replace ``record`` (matched by id)."""
        await self._progress.mutate("save progress", record.id, _upsert(record))
        self._logger.info("Saved progress for goal: %s", record.goal_id)

    async def get_progress(self, window: Optional[ProgressWindow] = None) -> List[ProgressRecord]:
        """
        Progress records in insertion order.

        Args:
            window: If given, only records with ``window.start <= timestamp < window.end``.
        """
        records = await self._read(self._progress, "load progress")
        if window is None:
            return list(records)
        return [record for record in records if window.contains(record.timestamp)]

    async def get_progress_for_goal(
        self, goal_id: str, window: Optional[ProgressWindow] = None
    ) -> List[ProgressRecord]:
        return [record for record in await self.get_progress(window) if record.goal_id == goal_id]

    async def delete_progress_for_goal(self, goal_id: str) -> int:
        """
        Remove every progress record of ``goal_id``.

        Returns:
            Number of records removed.
        """
        removed: List[int] = [0]

        def transform(current: Tuple[ProgressRecord, ...]) -> Optional[List[ProgressRecord]]:
            kept = [record for record in current if record.goal_id != goal_id]
            removed[0] = len(current) - len(kept)
            return kept if removed[0] else None

        await self._progress.mutate("delete progress", goal_id, transform)
        if removed[0]:
            self._logger.info("Deleted %d progress records for goal: %s", removed[0], goal_id)
        return removed[0]

    # ----- maintenance --------------------------------------------------------

    def invalidate(self) -> None:
        """Forget committed snapshots; the next read goes back to storage."""
        self._goals.invalidate()
        self._progress.invalidate()

    async def close(self) -> None:
        await self._storage.close()

    async def _read(self, collection: _GuardedCollection, operation: str) -> Sequence:
        try:
            return await collection.snapshot()
        except StorageError as e:
            self._logger.error("Failed to %s from '%s', error: %s", operation, collection.key, e)
            raise
