# tests/conftest.py
"""
Shared fixtures for fitgoals tests.

Provides loggers, in-memory storage, pre-wired components and factories
for goals and activity events.
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add source to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fitgoals.directory import GoalDirectory
from fitgoals.engine import ProgressEngine
from fitgoals.models import ActivityEvent, Goal, GoalType, WorkoutType
from fitgoals.processor import WorkoutEventProcessor
from fitgoals.storage.memory import MemoryBlobStorage
from fitgoals.store import GoalProgressStore

# Wednesday
FIXED_NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def logger():
    """Logger injected into components under test."""
    return logging.getLogger("tests.fitgoals")


@pytest.fixture
def memory_storage(logger):
    return MemoryBlobStorage(logger=logger)


@pytest.fixture
def store(memory_storage, logger):
    return GoalProgressStore(memory_storage, logger=logger)


@pytest.fixture
def engine(logger):
    return ProgressEngine(logger=logger)


@pytest.fixture
def directory(store, engine, logger):
    return GoalDirectory(store, engine, logger=logger, clock=lambda: FIXED_NOW)


@pytest.fixture
def processor(store, directory, logger):
    return WorkoutEventProcessor(store, directory, logger=logger, clock=lambda: FIXED_NOW)


@pytest.fixture
def make_goal():
    """Factory for goals with sensible defaults."""

    def _make(
        type=GoalType.WORKOUT_COUNT,
        target_value=10.0,
        title="Sample Goal",
        **kwargs,
    ):
        kwargs.setdefault("description", "Sample description")
        kwargs.setdefault("created_at", FIXED_NOW)
        return Goal(title=title, type=type, target_value=target_value, **kwargs)

    return _make


@pytest.fixture
def make_event():
    """Factory for completed activities."""

    def _make(
        type=WorkoutType.RUNNING,
        duration_seconds=1800,
        calories=250,
        distance_km=3.0,
        steps=3000,
        start_time=FIXED_NOW,
        **kwargs,
    ):
        return ActivityEvent(
            type=type,
            start_time=start_time,
            end_time=kwargs.pop("end_time", start_time),
            duration_seconds=duration_seconds,
            calories=calories,
            distance_km=distance_km,
            steps=steps,
            **kwargs,
        )

    return _make
