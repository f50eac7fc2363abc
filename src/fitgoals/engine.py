# src/fitgoals/engine.py
"""
Derived progress for goals.

``ProgressEngine`` is pure: it reads goals, progress records and activity
snapshots passed to it and returns immutable results. It never touches
storage, so it can be used freely from any task.

Two derivations exist:

- ``compute_progress`` sums stored progress records of a goal.
- ``compute_calendar_progress`` ignores stored records and re-aggregates
  the activities of the goal's current period, then applies the pacing
  heuristic: with ``days_passed`` days of an ``N`` day period elapsed,
  the goal is on track when the current value reaches
  ``tolerance * days_passed / N * target``.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional, Tuple

from .config.models import ProgressConfig
from .exceptions import GoalValidationError
from .metrics import aggregate
from .models import ActivityEvent, Goal, GoalPeriod, ProgressRecord, ensure_aware


class ProgressStatus(str, Enum):
    COMPLETED = "completed"
    ON_TRACK = "on_track"
    BEHIND = "behind"


@dataclass(frozen=True)
class GoalProgress:
    """
    Completion metrics of one goal. Never persisted.

    Attributes:
        goal_id: Goal the metrics belong to.
        current_value: Accumulated amount.
        target_value: The goal's target.
        unit: The goal's unit.
        completion_fraction: ``current / target`` clamped to [0, 1].
        percent: ``floor(completion_fraction * 100)``.
        remaining: ``max(target - current, 0)``.
        is_completed: ``completion_fraction >= 1``.
        is_on_track: Pacing verdict; True when no elapsed time is known.
    """

    goal_id: str
    current_value: float
    target_value: float
    unit: str
    completion_fraction: float
    percent: int
    remaining: float
    is_completed: bool
    is_on_track: bool

    @property
    def status(self) -> ProgressStatus:
        if self.is_completed:
            return ProgressStatus.COMPLETED
        if self.is_on_track:
            return ProgressStatus.ON_TRACK
        return ProgressStatus.BEHIND

    @property
    def status_text(self) -> str:
        return _STATUS_TEXT[self.status]

    @property
    def motivational_message(self) -> str:
        if self.status == ProgressStatus.COMPLETED:
            return "Congratulations! You've achieved your goal!"
        if self.status == ProgressStatus.ON_TRACK:
            return "Great progress! Keep it up!"
        return f"You need {int(self.remaining)} more {self.unit} to reach your goal."


_STATUS_TEXT = {
    ProgressStatus.COMPLETED: "Goal Completed!",
    ProgressStatus.ON_TRACK: "On Track",
    ProgressStatus.BEHIND: "Behind Schedule",
}


@dataclass(frozen=True)
class CalendarProgress(GoalProgress):
    """``GoalProgress`` of the current period, with the period it covers."""

    period_start: datetime
    period_end: datetime
    period_length_days: int
    days_remaining: int


# ----- calendar helpers -------------------------------------------------------


def midnight(moment: datetime) -> datetime:
    """Start of the day containing ``moment`` (tzinfo preserved)."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(moment: datetime, week_start: int = 0) -> datetime:
    """Midnight of the most recent ``week_start`` weekday (Monday is 0)."""
    offset = (moment.weekday() - week_start) % 7
    return midnight(moment) - timedelta(days=offset)


def first_of_month(moment: datetime) -> datetime:
    return midnight(moment).replace(day=1)


def add_month(moment: datetime) -> datetime:
    """Same day-of-month in the following calendar month (used on day 1)."""
    if moment.month == 12:
        return moment.replace(year=moment.year + 1, month=1)
    return moment.replace(month=moment.month + 1)


def period_bounds(period: GoalPeriod, now: datetime, week_start: int = 0) -> Tuple[datetime, datetime]:
    """
    Half-open ``[start, end)`` of the period containing ``now``.

    daily: ``[midnight, +1 day)``; weekly: ``[start of week, +7 days)``;
    monthly: ``[first of month, +1 calendar month)``. A naive ``now`` is
    taken as UTC.
    """
    now = ensure_aware(now)
    if period == GoalPeriod.DAILY:
        start = midnight(now)
        return start, start + timedelta(days=1)
    if period == GoalPeriod.WEEKLY:
        start = start_of_week(now, week_start)
        return start, start + timedelta(days=7)
    start = first_of_month(now)
    return start, add_month(start)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from ``start`` to ``end``, never negative."""
    return max((end - start).days, 0)


class ProgressEngine:
    """
    Computes completion and pacing metrics.

    Args:
        logger: Logger for data-quality warnings.
        on_track_tolerance: Share of the expected pro-rata value still counted as on track.
        week_start: First weekday of weekly periods (Monday is 0).
    """

    def __init__(
        self,
        logger: logging.Logger,
        on_track_tolerance: float = 0.8,
        week_start: int = 0,
    ) -> None:
        self._logger = logger
        self.on_track_tolerance = on_track_tolerance
        self.week_start = week_start

    @classmethod
    def from_config(cls, config: ProgressConfig, logger: logging.Logger) -> "ProgressEngine":
        return cls(
            logger=logger,
            on_track_tolerance=config.on_track_tolerance,
            week_start=config.week_start_index,
        )

    # ----- record based -------------------------------------------------------

    def compute_progress(
        self,
        goal: Goal,
        records: Iterable[ProgressRecord],
        now: Optional[datetime] = None,
    ) -> GoalProgress:
        """
        Completion of ``goal`` from the records that reference it.

        Records of other goals are ignored. When ``now`` is given and the
        goal has a period or deadline, ``is_on_track`` applies the pacing
        heuristic over that window; otherwise it is True.
        """
        total = sum(record.value for record in records if record.goal_id == goal.id)
        is_on_track = True
        if now is not None and (goal.period is not None or goal.target_date is not None):
            now = ensure_aware(now)
            start, end = self.goal_window(goal, now)
            is_on_track = self.is_on_track(
                total, goal.target_value, days_between(start, end), days_between(now, end)
            )
        return self._build(goal, total, is_on_track)

    # ----- calendar based -----------------------------------------------------

    def goal_window(self, goal: Goal, now: datetime) -> Tuple[datetime, datetime]:
        """
        Window a goal is measured over at ``now``.

        Periodic goals use their calendar period; goals with only a deadline
        run from their creation to the deadline.

        Raises:
            GoalValidationError: If the goal has neither period nor deadline.
        """
        now = ensure_aware(now)
        if goal.period is not None:
            return period_bounds(goal.period, now, self.week_start)
        if goal.target_date is not None:
            return goal.created_at, goal.target_date
        raise GoalValidationError(f"Goal {goal.id} has neither a period nor a target date.")

    def compute_calendar_progress(
        self,
        goal: Goal,
        activities: Iterable[ActivityEvent],
        now: datetime,
    ) -> CalendarProgress:
        """
        Progress of ``goal`` in the window containing ``now``, from activities.

        Only activities whose ``start_time`` lies in ``[period_start, period_end)``
        count.
        """
        now = ensure_aware(now)
        start, end = self.goal_window(goal, now)
        in_window = [a for a in activities if start <= a.start_time < end]
        current = aggregate(goal, in_window)

        period_length_days = days_between(start, end)
        days_remaining = days_between(now, end)
        is_on_track = self.is_on_track(current, goal.target_value, period_length_days, days_remaining)
        base = self._build(goal, current, is_on_track)
        return CalendarProgress(
            **base.__dict__,
            period_start=start,
            period_end=end,
            period_length_days=period_length_days,
            days_remaining=days_remaining,
        )

    def is_on_track(
        self,
        current_value: float,
        target_value: float,
        period_length_days: int,
        days_remaining: int,
    ) -> bool:
        """Pacing check: ``current >= tolerance * (days_passed / length) * target``."""
        days_passed = period_length_days - days_remaining
        if days_passed <= 0 or period_length_days <= 0:
            return True
        expected = (days_passed / period_length_days) * target_value
        return current_value >= expected * self.on_track_tolerance

    # ----- internals ----------------------------------------------------------

    def _build(self, goal: Goal, current: float, is_on_track: bool) -> GoalProgress:
        target = goal.target_value
        if target > 0:
            fraction = min(current / target, 1.0)
        else:
            self._logger.warning("Goal %s has non-positive target %s", goal.id, target)
            fraction = 0.0
        fraction = max(fraction, 0.0)
        return GoalProgress(
            goal_id=goal.id,
            current_value=current,
            target_value=target,
            unit=goal.unit,
            completion_fraction=fraction,
            percent=math.floor(round(fraction * 100, 9)),
            remaining=max(target - current, 0.0),
            is_completed=fraction >= 1.0,
            is_on_track=is_on_track,
        )
