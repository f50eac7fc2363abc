# src/fitgoals/models.py
"""
Core data models for the fitgoals library.

This module defines the Pydantic models used to represent goals, progress
records and completed activities, together with the enumerations that
classify them. Goals and progress records are the two persisted
collections; activity events arrive from an external activity source and
are never stored by this library.

Persisted models are frozen: an update is expressed as a new instance
(``goal.model_copy(update={...})``) that replaces the stored one wholesale.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: Any) -> Any:
    """Treat naive datetimes (and ISO strings without an offset) as UTC."""
    if isinstance(value, str):
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class GoalType(str, Enum):
    """
    The metric a goal tracks.

    Each type determines which field of a completed activity contributes
    to the goal and the unit used when none is given explicitly.
    """
    WORKOUT_COUNT = "workout_count"
    TOTAL_DURATION = "total_duration"
    DISTANCE = "distance"
    CALORIES = "calories"
    STEPS = "steps"
    SPECIFIC_WORKOUT = "specific_workout"

    @property
    def default_unit(self) -> str:
        return _DEFAULT_UNITS[self]


_DEFAULT_UNITS = {
    GoalType.WORKOUT_COUNT: "workouts",
    GoalType.TOTAL_DURATION: "minutes",
    GoalType.DISTANCE: "km",
    GoalType.CALORIES: "kcal",
    GoalType.STEPS: "steps",
    GoalType.SPECIFIC_WORKOUT: "workouts",
}


class GoalPeriod(str, Enum):
    """Recurring reset window a goal is scoped to."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class WorkoutType(str, Enum):
    """Kinds of activity reported by the activity source."""
    RUNNING = "running"
    WALKING = "walking"
    CYCLING = "cycling"
    SWIMMING = "swimming"
    STRENGTH = "strength"
    YOGA = "yoga"
    HIIT = "hiit"
    ROWING = "rowing"
    HIKING = "hiking"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value: object):  # type: ignore[override]
        """Case-insensitive lookup, e.g. ``"Running"`` -> RUNNING."""
        if isinstance(value, str):
            lower_value = value.lower()
            for member in cls:
                if member.value == lower_value:
                    return member
        return None


class Goal(BaseModel):
    """
    A user-defined target metric and the deadline or period it applies to.

    Attributes:
        id: Unique, immutable identifier.
        title: Short human-readable name.
        description: Free-form description.
        type: Metric tracked by this goal.
        target_value: Amount to reach. Expected to be positive but not enforced.
        unit: Display unit; defaults to the goal type's default unit.
        target_date: Optional deadline.
        period: Optional recurring window (daily, weekly, monthly).
        created_at: Creation time (UTC).
        is_active: Inactive goals are ignored when processing activities.
        target_workout_type: Required for ``specific_workout`` goals.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id, description="Unique goal identifier.")
    title: str = Field(description="Short goal title.")
    description: str = Field(default="", description="Optional longer description.")
    type: GoalType = Field(description="Metric tracked by the goal.")
    target_value: float = Field(description="Target amount in `unit`.")
    unit: str = Field(default="", description="Display unit for target and progress values.")
    target_date: Optional[datetime] = Field(default=None, description="Optional deadline (UTC).")
    period: Optional[GoalPeriod] = Field(default=None, description="Optional recurring window.")
    created_at: datetime = Field(default_factory=_utcnow, description="Creation timestamp (UTC).")
    is_active: bool = Field(default=True, description="Whether the goal receives activity progress.")
    target_workout_type: Optional[WorkoutType] = Field(
        default=None, description="Workout type counted by a specific_workout goal."
    )

    @model_validator(mode="before")
    @classmethod
    def default_unit_from_type(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("unit") and data.get("type") is not None:
            data = dict(data)
            data["unit"] = GoalType(data["type"]).default_unit
        return data

    @field_validator("created_at", "target_date", mode="before")
    @classmethod
    def ensure_utc(cls, v: Any) -> Any:
        return ensure_aware(v)

    @model_validator(mode="after")
    def check_specific_workout(self) -> "Goal":
        if self.type == GoalType.SPECIFIC_WORKOUT and self.target_workout_type is None:
            raise ValueError("specific_workout goals require target_workout_type")
        return self

    def applies_to(self, workout_type: WorkoutType) -> bool:
        """True when an activity of ``workout_type`` can contribute to this goal."""
        if self.type != GoalType.SPECIFIC_WORKOUT:
            return True
        return self.target_workout_type == workout_type


class ProgressRecord(BaseModel):
    """
    A timestamped contribution toward a goal.

    ``goal_id`` is not checked against the goal collection; records for a
    deleted goal remain stored until removed explicitly.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id, description="Unique record identifier.")
    goal_id: str = Field(description="Identifier of the goal this record contributes to.")
    value: float = Field(description="Contributed amount, in the goal's unit.")
    timestamp: datetime = Field(default_factory=_utcnow, description="When the contribution happened (UTC).")

    @field_validator("timestamp", mode="before")
    @classmethod
    def ensure_utc(cls, v: Any) -> Any:
        return ensure_aware(v)


class ActivityEvent(BaseModel):
    """
    A completed activity as emitted by the activity source.

    Optional metrics are ``None`` when the source did not measure them,
    which is distinct from a measured zero.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    type: WorkoutType
    start_time: datetime
    end_time: datetime
    duration_seconds: float = Field(ge=0)
    calories: Optional[float] = None
    distance_km: Optional[float] = None
    steps: Optional[int] = None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def ensure_utc(cls, v: Any) -> Any:
        return ensure_aware(v)

    @property
    def duration_minutes(self) -> float:
        return self.duration_seconds / 60.0


@dataclass(frozen=True)
class ProgressWindow:
    """Half-open time window ``[start, end)`` used to filter progress records."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", ensure_aware(self.start))
        object.__setattr__(self, "end", ensure_aware(self.end))

    def contains(self, moment: datetime) -> bool:
        return self.start <= ensure_aware(moment) < self.end
