# src/fitgoals/processor.py
"""
Turns completed activities into goal progress.

For every active goal that applies to an activity, the processor extracts
the goal's metric from the activity (see ``fitgoals.metrics``) and writes
one new progress record through the store. Goals whose metric the activity
does not carry are skipped without a write.
"""

import logging
from typing import Iterable, List, Optional

from .directory import Clock, GoalDirectory, utc_now
from .logging_config import log_display
from .metrics import extract_value
from .models import ActivityEvent, Goal, ProgressRecord, WorkoutType
from .store import GoalProgressStore


def get_relevant_goals(goals: Iterable[Goal], workout_type: WorkoutType) -> List[Goal]:
    """Active goals an activity of ``workout_type`` can contribute to."""
    return [goal for goal in goals if goal.is_active and goal.applies_to(workout_type)]


class WorkoutEventProcessor:
    """
    Applies activity events to the goals currently loaded in a directory.

    Args:
        store: Store receiving the progress records.
        directory: Source of the current goal set; its progress snapshot is
            reloaded after records were written.
        logger: Logger for processing outcomes.
        clock: Timestamp source for new records; defaults to UTC now.
    """

    def __init__(
        self,
        store: GoalProgressStore,
        directory: GoalDirectory,
        logger: logging.Logger,
        clock: Optional[Clock] = None,
    ) -> None:
        self._store = store
        self._directory = directory
        self._logger = logger
        self._clock = clock or utc_now

    def get_relevant_goals(self, workout_type: WorkoutType) -> List[Goal]:
        return get_relevant_goals(self._directory.goals, workout_type)

    async def process_workout_completion(self, event: ActivityEvent) -> int:
        """
        Record progress of ``event`` for every applicable goal.

        Returns:
            Number of goals that received a progress record.

        Raises:
            StorageError: If a write fails. Records written before the
                failure stay in place; later goals are not processed.
                The directory's progress snapshot is still reloaded so it
                includes those earlier committed records.
        """
        self._logger.info("Processing workout completion for goal updates: %s", event.id)
        updated = 0
        try:
            for goal in self.get_relevant_goals(event.type):
                value = extract_value(goal, event)
                if value is None:
                    self._logger.debug(
                        "Skipping goal %s: activity %s has no %s value", goal.id, event.id, goal.type.value
                    )
                    continue
                record = ProgressRecord(goal_id=goal.id, value=value, timestamp=self._clock())
                await self._store.save_progress(record)
                updated += 1
        finally:
            if updated:
                await self._directory.load_progress()

        log_display(self._logger, logging.INFO, "Completed progress updates for %d goals", updated)
        return updated

    async def process_events(self, events: Iterable[ActivityEvent]) -> int:
        """Process ``events`` in order; returns the total number of goal updates."""
        total = 0
        for event in events:
            total += await self.process_workout_completion(event)
        return total
