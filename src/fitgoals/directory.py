# src/fitgoals/directory.py
"""
Read cache of goals and progress for the presentation layer.

``GoalDirectory`` holds the snapshot loaded by its most recent reload. It
does not follow the store on its own: every mutation issued through the
directory reloads the affected collection once the write completed, and
callers that write through the store directly must call ``reload`` (or
``load_goals`` / ``load_progress``) themselves.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from .activity import ActivitySource
from .engine import CalendarProgress, GoalProgress, ProgressEngine
from .exceptions import ConfigError, StorageError
from .models import Goal, GoalPeriod, GoalType, ProgressRecord, WorkoutType, ensure_aware
from .store import GoalProgressStore

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GoalDirectory:
    """
    Snapshot-based query interface over a ``GoalProgressStore``.

    Args:
        store: The goal and progress store.
        engine: Engine used for derived progress.
        logger: Logger for directory operations.
        activity_source: Optional source used by ``get_calendar_progress``.
        clock: Returns the current time; defaults to UTC now.
    """

    def __init__(
        self,
        store: GoalProgressStore,
        engine: ProgressEngine,
        logger: logging.Logger,
        activity_source: Optional[ActivitySource] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._engine = engine
        self._logger = logger
        self._activity_source = activity_source
        self._clock = clock
        self._goals: Tuple[Goal, ...] = ()
        self._progress: Tuple[ProgressRecord, ...] = ()

    # ----- snapshot -----------------------------------------------------------

    @property
    def goals(self) -> Tuple[Goal, ...]:
        return self._goals

    @property
    def progress(self) -> Tuple[ProgressRecord, ...]:
        return self._progress

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        return next((goal for goal in self._goals if goal.id == goal_id), None)

    async def load_goals(self) -> None:
        """Refresh the goal snapshot. A failed load keeps the previous snapshot."""
        try:
            self._goals = tuple(await self._store.get_all_goals())
        except StorageError as e:
            self._logger.error("Failed to load goals: %s", e)

    async def load_progress(self) -> None:
        """Refresh the progress snapshot. A failed load keeps the previous snapshot."""
        try:
            self._progress = tuple(await self._store.get_progress())
        except StorageError as e:
            self._logger.error("Failed to load progress: %s", e)

    async def reload(self) -> None:
        await self.load_goals()
        await self.load_progress()

    # ----- mutations ----------------------------------------------------------

    async def set_goal(self, goal: Goal) -> None:
        """Save (insert or replace) ``goal`` and reload goals."""
        self._logger.info("Setting goal: %s", goal.title)
        try:
            await self._store.save_goal(goal)
        except StorageError:
            self._logger.error("Failed to set goal: %s", goal.title)
            raise
        await self.load_goals()

    async def create_goal(
        self,
        title: str,
        type: GoalType,
        target_value: float,
        period: Optional[GoalPeriod] = None,
        target_date: Optional[datetime] = None,
        description: str = "",
        unit: str = "",
        target_workout_type: Optional[WorkoutType] = None,
    ) -> Goal:
        """Build a new active goal, save it and return it."""
        goal = Goal(
            title=title,
            description=description,
            type=type,
            target_value=target_value,
            unit=unit,
            period=period,
            target_date=target_date,
            created_at=self._clock(),
            target_workout_type=target_workout_type,
        )
        await self.set_goal(goal)
        return goal

    async def delete_goal(self, goal_id: str) -> None:
        """Delete a goal and reload goals. Its progress records are kept."""
        self._logger.info("Deleting goal: %s", goal_id)
        try:
            await self._store.delete_goal(goal_id)
        except StorageError:
            self._logger.error("Failed to delete goal: %s", goal_id)
            raise
        await self.load_goals()

    async def update_progress(self, goal_id: str, value: float = 0.0) -> ProgressRecord:
        """Record ``value`` toward ``goal_id`` now, then reload progress."""
        self._logger.info("Updating progress for goal: %s", goal_id)
        record = ProgressRecord(goal_id=goal_id, value=value, timestamp=self._clock())
        try:
            await self._store.save_progress(record)
        except StorageError:
            self._logger.error("Failed to update progress for goal: %s", goal_id)
            raise
        await self.load_progress()
        return record

    # ----- queries ------------------------------------------------------------

    def list_active_goals(self, now: Optional[datetime] = None) -> List[Goal]:
        """Active goals whose deadline, if any, has not passed."""
        now = ensure_aware(now or self._clock())
        return [
            goal
            for goal in self._goals
            if goal.is_active and (goal.target_date is None or goal.target_date > now)
        ]

    def list_completed_goals(self) -> List[Goal]:
        return [goal for goal in self._goals if self.is_goal_completed(goal)]

    def get_derived_progress(self, goal: Goal, now: Optional[datetime] = None) -> GoalProgress:
        """Progress of ``goal`` from the cached records, paced at ``now``."""
        return self._engine.compute_progress(goal, self._progress, now or self._clock())

    def get_progress(self, goal: Goal) -> float:
        """Completion fraction in [0, 1]."""
        return self._engine.compute_progress(goal, self._progress).completion_fraction

    def get_progress_percentage(self, goal: Goal) -> int:
        return self._engine.compute_progress(goal, self._progress).percent

    def is_goal_completed(self, goal: Goal) -> bool:
        return self._engine.compute_progress(goal, self._progress).is_completed

    async def get_calendar_progress(
        self, goal: Goal, now: Optional[datetime] = None
    ) -> CalendarProgress:
        """
        Progress of ``goal`` in its current window, from the activity source.

        Raises:
            ConfigError: If no activity source was provided.
            GoalValidationError: If the goal has neither period nor deadline.
        """
        if self._activity_source is None:
            raise ConfigError("Calendar progress needs an activity source.")
        now = ensure_aware(now or self._clock())
        start, end = self._engine.goal_window(goal, now)
        activities = await self._activity_source.get_activities(start, end)
        return self._engine.compute_calendar_progress(goal, activities, now)
