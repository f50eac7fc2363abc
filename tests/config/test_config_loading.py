# tests/config/test_config_loading.py
"""
Tests for fitgoals configuration loading.

Validates the precedence of defaults, TOML file, environment variables
and explicit overrides, and that invalid settings surface as ConfigError.
"""

import os
import textwrap
from pathlib import Path

import pytest

from fitgoals.config import FitGoalsConfig, ProgressConfig, StorageConfig, load_config
from fitgoals.exceptions import ConfigError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_toml(path: Path, content: str) -> str:
    """Write TOML content to a file and return the path string."""
    path.write_text(textwrap.dedent(content))
    return str(path)


@pytest.fixture
def user_config(tmp_path):
    return _write_toml(
        tmp_path / "config.toml",
        """
        [storage]
        backend = "memory"
        goals_key = "my_goals"

        [progress]
        week_start = "sunday"
        """,
    )


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TestConfigModels:
    """Tests for defaults and validation of the config models."""

    def test_defaults(self):
        config = FitGoalsConfig()
        assert config.storage.backend == "json"
        assert config.storage.goals_key == "fitness_goals"
        assert config.storage.progress_key == "goal_progress"
        assert config.progress.on_track_tolerance == 0.8
        assert config.progress.week_start_index == 0
        assert config.logging.console_enabled is False

    def test_equal_keys_rejected(self):
        with pytest.raises(ValueError):
            StorageConfig(goals_key="data", progress_key="data")

    def test_week_start_validated(self):
        assert ProgressConfig(week_start=" Sunday ").week_start_index == 6
        with pytest.raises(ValueError):
            ProgressConfig(week_start="someday")

    @pytest.mark.parametrize("tolerance", [0.0, 1.5])
    def test_tolerance_range(self, tolerance):
        with pytest.raises(ValueError):
            ProgressConfig(on_track_tolerance=tolerance)

    def test_path_is_expanded(self):
        assert not StorageConfig(path="~/goals").path.startswith("~")


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep the developer's environment and user config out of the tests."""
    for name in list(os.environ):
        if name.startswith("FITGOALS_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("HOME", str(tmp_path / "empty-home"))


class TestLoadConfig:
    """Tests for load_config precedence."""

    def test_defaults_without_sources(self):
        config = load_config()
        assert isinstance(config, FitGoalsConfig)
        assert config.storage.backend == "json"

    def test_file_values_applied(self, user_config):
        config = load_config(config_file_path=user_config)
        assert config.storage.backend == "memory"
        assert config.storage.goals_key == "my_goals"
        assert config.storage.progress_key == "goal_progress"
        assert config.progress.week_start == "sunday"

    def test_env_overrides_file(self, user_config, monkeypatch):
        monkeypatch.setenv("FITGOALS_STORAGE__BACKEND", "json")
        monkeypatch.setenv("OTHER_STORAGE__BACKEND", "ignored")
        config = load_config(config_file_path=user_config)
        assert config.storage.backend == "json"
        assert config.storage.goals_key == "my_goals"

    def test_env_values_are_coerced(self, monkeypatch):
        monkeypatch.setenv("FITGOALS_PROGRESS__ON_TRACK_TOLERANCE", "0.9")
        assert load_config().progress.on_track_tolerance == 0.9

    def test_custom_env_prefix(self, monkeypatch):
        monkeypatch.setenv("GOALS_STORAGE__BACKEND", "memory")
        assert load_config(env_prefix="GOALS").storage.backend == "memory"

    def test_overrides_win(self, user_config, monkeypatch):
        monkeypatch.setenv("FITGOALS_PROGRESS__WEEK_START", "tuesday")
        config = load_config(
            config_file_path=user_config,
            overrides={"progress": {"week_start": "saturday"}},
        )
        assert config.progress.week_start == "saturday"
        assert config.storage.backend == "memory"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(config_file_path=str(tmp_path / "absent.toml"))

    def test_malformed_toml(self, tmp_path):
        path = _write_toml(tmp_path / "bad.toml", "[storage\nbackend = ")
        with pytest.raises(ConfigError):
            load_config(config_file_path=path)

    def test_validation_error_becomes_config_error(self, tmp_path):
        path = _write_toml(
            tmp_path / "keys.toml",
            """
            [storage]
            goals_key = "same"
            progress_key = "same"
            """,
        )
        with pytest.raises(ConfigError):
            load_config(config_file_path=path)

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("FITGOALS_PROGRESS__WEEK_START", "someday")
        with pytest.raises(ConfigError):
            load_config()

    def test_default_file_location(self, tmp_path, monkeypatch):
        home = tmp_path / "home"
        (home / ".config" / "fitgoals").mkdir(parents=True)
        _write_toml(home / ".config" / "fitgoals" / "config.toml", '[storage]\nbackend = "memory"\n')
        monkeypatch.setenv("HOME", str(home))

        assert load_config().storage.backend == "memory"
