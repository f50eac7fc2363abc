# src/fitgoals/activity.py
"""
Activity source interface.

The activity source is the external producer of completed workouts. The
library only needs to pull a snapshot of activities for a time range
(for calendar progress); pushing individual events is done by handing them
to ``WorkoutEventProcessor``.
"""

from datetime import datetime
from typing import Iterable, List, Protocol, runtime_checkable

from .models import ActivityEvent, ensure_aware


@runtime_checkable
class ActivitySource(Protocol):
    """Protocol for activity providers."""

    async def get_activities(self, start: datetime, end: datetime) -> List[ActivityEvent]: ...


class ActivityLog:
    """
    In-memory activity source.

    Activities are returned in the order they were added.

    Example:
        >>> log = ActivityLog()
        >>> log.add(event)
        >>> await log.get_activities(week_start, week_end)
    """

    def __init__(self, activities: Iterable[ActivityEvent] = ()) -> None:
        self._activities: List[ActivityEvent] = list(activities)

    def add(self, activity: ActivityEvent) -> None:
        self._activities.append(activity)

    def __len__(self) -> int:
        return len(self._activities)

    async def get_activities(self, start: datetime, end: datetime) -> List[ActivityEvent]:
        """Activities with ``start <= start_time < end``."""
        start, end = ensure_aware(start), ensure_aware(end)
        return [a for a in self._activities if start <= a.start_time < end]
