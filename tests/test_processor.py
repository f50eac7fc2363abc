# tests/test_processor.py
"""
Tests for WorkoutEventProcessor and the metric extraction table.

Covers:
- Goal selection (active flag, specific workout targeting)
- One progress write per applicable goal with the extracted value
- Skipping goals whose metric the activity lacks
- Storage failures and directory refresh
"""

import logging

import pytest

from fitgoals.exceptions import StorageError
from fitgoals.metrics import METRIC_EXTRACTORS, extract_value
from fitgoals.models import GoalType, WorkoutType
from fitgoals.processor import get_relevant_goals


async def _load(directory, store, goals):
    for goal in goals:
        await store.save_goal(goal)
    await directory.load_goals()


# =============================================================================
# Extraction Table
# =============================================================================


class TestExtraction:
    """Tests for extract_value."""

    def test_table_covers_every_goal_type(self):
        assert set(METRIC_EXTRACTORS) == set(GoalType)

    def test_values_per_type(self, make_goal, make_event):
        event = make_event(duration_seconds=1800, calories=300, distance_km=5.0, steps=4000)
        assert extract_value(make_goal(type=GoalType.WORKOUT_COUNT), event) == 1.0
        assert extract_value(make_goal(type=GoalType.TOTAL_DURATION), event) == 30.0
        assert extract_value(make_goal(type=GoalType.CALORIES), event) == 300.0
        assert extract_value(make_goal(type=GoalType.DISTANCE), event) == 5.0
        assert extract_value(make_goal(type=GoalType.STEPS), event) == 4000.0

    def test_absent_metrics_skip(self, make_goal, make_event):
        event = make_event(calories=None, distance_km=None, steps=None)
        assert extract_value(make_goal(type=GoalType.CALORIES), event) is None
        assert extract_value(make_goal(type=GoalType.DISTANCE), event) is None
        assert extract_value(make_goal(type=GoalType.STEPS), event) is None
        assert extract_value(make_goal(type=GoalType.TOTAL_DURATION), event) == 30.0

    def test_measured_zero_is_not_skipped(self, make_goal, make_event):
        event = make_event(calories=0)
        assert extract_value(make_goal(type=GoalType.CALORIES), event) == 0.0

    def test_specific_workout_mismatch(self, make_goal, make_event):
        goal = make_goal(type=GoalType.SPECIFIC_WORKOUT, target_workout_type=WorkoutType.CYCLING)
        assert extract_value(goal, make_event(type=WorkoutType.RUNNING)) is None
        assert extract_value(goal, make_event(type=WorkoutType.CYCLING)) == 1.0


# =============================================================================
# Goal Selection
# =============================================================================


class TestRelevantGoals:
    """Tests for get_relevant_goals."""

    def test_excludes_inactive_and_mismatched(self, make_goal):
        goals = [
            make_goal(type=GoalType.WORKOUT_COUNT, is_active=True),
            make_goal(type=GoalType.TOTAL_DURATION, is_active=False),
            make_goal(type=GoalType.SPECIFIC_WORKOUT, target_workout_type=WorkoutType.RUNNING),
            make_goal(type=GoalType.SPECIFIC_WORKOUT, target_workout_type=WorkoutType.CYCLING),
        ]

        relevant = get_relevant_goals(goals, WorkoutType.RUNNING)

        assert len(relevant) == 2
        assert any(g.type == GoalType.WORKOUT_COUNT for g in relevant)
        assert any(
            g.type == GoalType.SPECIFIC_WORKOUT and g.target_workout_type == WorkoutType.RUNNING
            for g in relevant
        )

    @pytest.mark.asyncio
    async def test_uses_directory_snapshot(self, processor, directory, store, make_goal):
        await _load(directory, store, [make_goal(is_active=False), make_goal()])
        assert len(processor.get_relevant_goals(WorkoutType.YOGA)) == 1


# =============================================================================
# Event Processing
# =============================================================================


class TestProcessWorkoutCompletion:
    """Tests for process_workout_completion."""

    @pytest.mark.asyncio
    async def test_one_write_per_metric_goal(self, processor, directory, store, make_goal, make_event, fixed_now, caplog):
        goals = [
            make_goal(type=GoalType.WORKOUT_COUNT, target_value=5.0),
            make_goal(type=GoalType.TOTAL_DURATION, target_value=60.0),
            make_goal(type=GoalType.CALORIES, target_value=1000.0),
            make_goal(type=GoalType.DISTANCE, target_value=20.0),
            make_goal(type=GoalType.STEPS, target_value=10000.0),
        ]
        await _load(directory, store, goals)
        event = make_event(
            type=WorkoutType.RUNNING, duration_seconds=1800, calories=300, distance_km=5.0, steps=4000
        )

        with caplog.at_level(logging.INFO):
            updated = await processor.process_workout_completion(event)

        assert updated == 5
        records = await store.get_progress()
        assert len(records) == 5
        assert [r.value for r in records] == [1.0, 30.0, 300.0, 5.0, 4000.0]
        assert [r.goal_id for r in records] == [g.id for g in goals]
        assert len({r.id for r in records}) == 5
        assert all(r.timestamp == fixed_now for r in records)
        summary = [r for r in caplog.records if r.getMessage() == "Completed progress updates for 5 goals"]
        assert len(summary) == 1
        assert getattr(summary[0], "display", False) is True

    @pytest.mark.asyncio
    async def test_all_goal_types_with_specific_workout(self, processor, directory, store, make_goal, make_event):
        goals = [
            make_goal(type=GoalType.WORKOUT_COUNT),
            make_goal(type=GoalType.TOTAL_DURATION),
            make_goal(type=GoalType.CALORIES),
            make_goal(type=GoalType.DISTANCE),
            make_goal(type=GoalType.STEPS),
            make_goal(type=GoalType.SPECIFIC_WORKOUT, target_workout_type=WorkoutType.RUNNING),
        ]
        await _load(directory, store, goals)
        event = make_event(duration_seconds=1800, calories=300, distance_km=5.0, steps=4000)

        assert await processor.process_workout_completion(event) == 6
        values = {r.goal_id: r.value for r in await store.get_progress()}
        assert values[goals[5].id] == 1.0

    @pytest.mark.asyncio
    async def test_specific_workout_for_other_type_is_not_written(self, processor, directory, store, make_goal, make_event):
        running = make_goal(type=GoalType.SPECIFIC_WORKOUT, target_workout_type=WorkoutType.RUNNING)
        cycling = make_goal(type=GoalType.SPECIFIC_WORKOUT, target_workout_type=WorkoutType.CYCLING)
        await _load(directory, store, [running, cycling])

        assert await processor.process_workout_completion(make_event(type=WorkoutType.RUNNING)) == 1
        assert [r.goal_id for r in await store.get_progress()] == [running.id]

    @pytest.mark.asyncio
    async def test_only_cycling_goal_gets_no_write(self, processor, directory, store, make_goal, make_event):
        cycling = make_goal(type=GoalType.SPECIFIC_WORKOUT, target_workout_type=WorkoutType.CYCLING)
        await _load(directory, store, [cycling])

        assert await processor.process_workout_completion(make_event(type=WorkoutType.RUNNING)) == 0
        assert await store.get_progress() == []

    @pytest.mark.asyncio
    async def test_goal_skipped_when_metric_absent(self, processor, directory, store, make_goal, make_event):
        await _load(
            directory,
            store,
            [make_goal(type=GoalType.CALORIES), make_goal(type=GoalType.WORKOUT_COUNT)],
        )
        assert await processor.process_workout_completion(make_event(calories=None)) == 1

    @pytest.mark.asyncio
    async def test_inactive_goal_not_updated(self, processor, directory, store, make_goal, make_event):
        await _load(directory, store, [make_goal(is_active=False)])
        assert await processor.process_workout_completion(make_event()) == 0

    @pytest.mark.asyncio
    async def test_directory_progress_is_refreshed(self, processor, directory, store, make_goal, make_event):
        goal = make_goal(target_value=2.0)
        await _load(directory, store, [goal])

        await processor.process_workout_completion(make_event())

        assert len(directory.progress) == 1
        assert directory.get_progress_percentage(goal) == 50

    @pytest.mark.asyncio
    async def test_storage_error_propagates(self, processor, directory, store, make_goal, make_event, memory_storage):
        goals = [make_goal(title="first"), make_goal(title="second")]
        await _load(directory, store, goals)
        original_save = memory_storage.save
        calls = []

        async def flaky_save(key, collection):
            calls.append(key)
            if len(calls) > 1:
                raise StorageError("disk full", operation="save", key=key)
            await original_save(key, collection)

        memory_storage.save = flaky_save

        with pytest.raises(StorageError):
            await processor.process_workout_completion(make_event())

        assert [r.goal_id for r in await store.get_progress()] == [goals[0].id]
        assert [r.goal_id for r in directory.progress] == [goals[0].id]

    @pytest.mark.asyncio
    async def test_process_events_batch(self, processor, directory, store, make_goal, make_event):
        await _load(directory, store, [make_goal(), make_goal(type=GoalType.TOTAL_DURATION)])
        total = await processor.process_events([make_event(), make_event(duration_seconds=600)])
        assert total == 4
        assert sum(r.value for r in await store.get_progress()) == pytest.approx(1 + 30 + 1 + 10)
