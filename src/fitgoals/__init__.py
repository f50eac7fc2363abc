# src/fitgoals/__init__.py
"""
fitgoals - fitness goal tracking with concurrent-safe progress storage.

Tracks user-defined fitness goals, records progress toward them from
completed activities, and derives completion and pacing status.
"""

from importlib.metadata import PackageNotFoundError, version

from .activity import ActivityLog, ActivitySource
from .api import FitGoals
from .directory import GoalDirectory
from .engine import CalendarProgress, GoalProgress, ProgressEngine, ProgressStatus, period_bounds
from .exceptions import ConfigError, FitGoalsError, GoalValidationError, StorageError
from .models import (
    ActivityEvent,
    Goal,
    GoalPeriod,
    GoalType,
    ProgressRecord,
    ProgressWindow,
    WorkoutType,
)
from .processor import WorkoutEventProcessor, get_relevant_goals
from .store import GOALS_KEY, PROGRESS_KEY, GoalProgressStore

try:
    __version__ = version("fitgoals")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "ActivityEvent",
    "ActivityLog",
    "ActivitySource",
    "CalendarProgress",
    "ConfigError",
    "FitGoals",
    "FitGoalsError",
    "GOALS_KEY",
    "Goal",
    "GoalDirectory",
    "GoalPeriod",
    "GoalProgress",
    "GoalProgressStore",
    "GoalType",
    "GoalValidationError",
    "PROGRESS_KEY",
    "ProgressEngine",
    "ProgressRecord",
    "ProgressStatus",
    "ProgressWindow",
    "StorageError",
    "WorkoutEventProcessor",
    "WorkoutType",
    "get_relevant_goals",
    "period_bounds",
    "__version__",
]
