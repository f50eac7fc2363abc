# src/fitgoals/config/models.py
"""
Configuration models for fitgoals.

These Pydantic models give type-safe access to configuration with
validated defaults. The hierarchy:

    FitGoalsConfig (root)
    ├── StorageConfig   - persistence backend and collection keys
    ├── ProgressConfig  - pacing heuristic settings
    └── LoggingConfig   - console/file logging settings

Usage:
    >>> from fitgoals.config.models import FitGoalsConfig
    >>> config = FitGoalsConfig()
    >>> config.progress.on_track_tolerance
    0.8
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

DEFAULT_GOALS_KEY = "fitness_goals"
DEFAULT_PROGRESS_KEY = "goal_progress"

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


# =============================================================================
# STORAGE CONFIGURATION
# =============================================================================


class StorageConfig(BaseModel):
    """
    Where and how the goal and progress collections are persisted.

    Examples:
        >>> StorageConfig().backend
        'json'
        >>> StorageConfig().goals_key
        'fitness_goals'
    """

    backend: str = Field(
        default="json",
        description="Blob storage backend: 'json' (one file per key) or 'memory'.",
    )
    path: str = Field(
        default="~/.local/share/fitgoals",
        description=(
            "Directory for the json backend. "
            "Tilde and environment variable expansion is applied."
        ),
    )
    goals_key: str = Field(
        default=DEFAULT_GOALS_KEY,
        min_length=1,
        description="Storage key of the goal collection.",
    )
    progress_key: str = Field(
        default=DEFAULT_PROGRESS_KEY,
        min_length=1,
        description="Storage key of the progress record collection.",
    )

    @field_validator("path")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand ~ and environment variables in path."""
        return os.path.expanduser(os.path.expandvars(v))

    @field_validator("backend")
    @classmethod
    def normalize_backend(cls, v: str) -> str:
        return v.strip().lower()

    @model_validator(mode="after")
    def keys_must_differ(self) -> StorageConfig:
        if self.goals_key == self.progress_key:
            raise ValueError(
                f"goals_key and progress_key must differ (both are '{self.goals_key}')"
            )
        return self


# =============================================================================
# PROGRESS CONFIGURATION
# =============================================================================


class ProgressConfig(BaseModel):
    """
    Settings for derived progress.

    Examples:
        >>> ProgressConfig().week_start
        'monday'
    """

    on_track_tolerance: float = Field(
        default=0.8,
        gt=0.0,
        le=1.0,
        description="Fraction of the expected pro-rata progress that still counts as on track.",
    )
    week_start: str = Field(
        default="monday",
        description="First day of a weekly period.",
    )

    @field_validator("week_start")
    @classmethod
    def validate_week_start(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in WEEKDAYS:
            raise ValueError(f"week_start must be one of {', '.join(WEEKDAYS)}")
        return v

    @property
    def week_start_index(self) -> int:
        """``week_start`` as a ``datetime.weekday()`` number (Monday is 0)."""
        return WEEKDAYS.index(self.week_start)


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


class LoggingConfig(BaseModel):
    """
    Logging settings consumed by ``fitgoals.logging_config.configure_logging``.

    When ``console_enabled`` is False the console handler only passes
    records logged with ``extra={"display": True}``.
    """

    console_enabled: bool = False
    console_level: str = "WARNING"
    console_format: str = "%(levelname)s - %(message)s"
    display_min_level: str = "INFO"
    file_enabled: bool = False
    file_level: str = "DEBUG"
    file_directory: str = "~/.local/share/fitgoals/logs"
    file_name: str = "{app}.log"
    file_format: str = (
        "%(asctime)s [%(levelname)-8s] %(name)-30s - %(message)s (%(filename)s:%(lineno)d)"
    )
    rotation_max_bytes: int = Field(default=5 * 1024 * 1024, ge=0)
    rotation_backup_count: int = Field(default=3, ge=0)
    components: dict[str, str] = Field(
        default_factory=lambda: {"fitgoals": "INFO", "asyncio": "WARNING"}
    )

    @field_validator("console_level", "file_level", "display_min_level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.strip().upper()


# =============================================================================
# ROOT CONFIGURATION
# =============================================================================


class FitGoalsConfig(BaseSettings):
    """
    Root configuration object.

    Instances read ``FITGOALS_*`` environment variables (nested sections use
    ``__``, e.g. ``FITGOALS_STORAGE__BACKEND=memory``) below any keyword
    arguments. ``load_config`` adds a TOML file as the lowest layer.
    """

    model_config = SettingsConfigDict(
        env_prefix="FITGOALS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    progress: ProgressConfig = Field(default_factory=ProgressConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Highest precedence first: overrides, environment, TOML file.
        return (init_settings, env_settings, TomlConfigSettingsSource(settings_cls))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FitGoalsConfig:
        return cls.model_validate(data)
