# src/fitgoals/metrics.py
"""
Mapping from goal types to the activity metric that feeds them.

A single table drives both live event processing (one progress record per
activity) and calendar re-aggregation (summing a snapshot of activities),
so the two can never disagree about what an activity is worth to a goal.
"""

from typing import Callable, Dict, Iterable, Optional

from .models import ActivityEvent, Goal, GoalType

Extractor = Callable[[Goal, ActivityEvent], Optional[float]]


def _one(goal: Goal, event: ActivityEvent) -> Optional[float]:
    return 1.0


def _duration_minutes(goal: Goal, event: ActivityEvent) -> Optional[float]:
    return event.duration_minutes


def _calories(goal: Goal, event: ActivityEvent) -> Optional[float]:
    return event.calories


def _distance(goal: Goal, event: ActivityEvent) -> Optional[float]:
    return event.distance_km


def _steps(goal: Goal, event: ActivityEvent) -> Optional[float]:
    return float(event.steps) if event.steps is not None else None


def _matching_workout(goal: Goal, event: ActivityEvent) -> Optional[float]:
    return 1.0 if event.type == goal.target_workout_type else None


METRIC_EXTRACTORS: Dict[GoalType, Extractor] = {
    GoalType.WORKOUT_COUNT: _one,
    GoalType.TOTAL_DURATION: _duration_minutes,
    GoalType.CALORIES: _calories,
    GoalType.DISTANCE: _distance,
    GoalType.STEPS: _steps,
    GoalType.SPECIFIC_WORKOUT: _matching_workout,
}


def extract_value(goal: Goal, event: ActivityEvent) -> Optional[float]:
    """
    Contribution of ``event`` to ``goal``.

    Returns:
        The value to record, or None when the event does not carry the
        metric the goal needs (the goal is skipped for this event).
    """
    return METRIC_EXTRACTORS[goal.type](goal, event)


def aggregate(goal: Goal, events: Iterable[ActivityEvent]) -> float:
    """Sum of ``extract_value`` over ``events``, ignoring skipped ones."""
    total = 0.0
    for event in events:
        value = extract_value(goal, event)
        if value is not None:
            total += value
    return total
