# src/fitgoals/config/loader.py
"""
Layered configuration loading.

Precedence, lowest to highest:
    1. Model defaults (``FitGoalsConfig()``)
    2. TOML file (``config_file_path`` or ``~/.config/fitgoals/config.toml``)
    3. Environment variables with the ``FITGOALS_`` prefix; nested keys use
       double underscores, e.g. ``FITGOALS_STORAGE__BACKEND=memory``
    4. Explicit ``overrides`` dictionary

The layering itself is done by pydantic-settings; this module only picks
the TOML file and turns loading failures into ``ConfigError``.
"""

import os
import pathlib
from typing import Any, Mapping, Optional, Type

from pydantic_settings import SettingsConfigDict

from ..exceptions import ConfigError
from .models import FitGoalsConfig

DEFAULT_CONFIG_PATH = "~/.config/fitgoals/config.toml"


def _resolve_config_file(config_file_path: Optional[str]) -> Optional[pathlib.Path]:
    if config_file_path is not None:
        path = pathlib.Path(os.path.expanduser(config_file_path))
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        return path
    default_path = pathlib.Path(os.path.expanduser(DEFAULT_CONFIG_PATH))
    return default_path if default_path.is_file() else None


def _settings_class(toml_file: Optional[pathlib.Path], env_prefix: str) -> Type[FitGoalsConfig]:
    """``FitGoalsConfig`` bound to a TOML file and environment prefix."""
    return type(
        "LayeredFitGoalsConfig",
        (FitGoalsConfig,),
        {"model_config": SettingsConfigDict(toml_file=toml_file, env_prefix=f"{env_prefix}_")},
    )


def load_config(
    config_file_path: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    env_prefix: str = "FITGOALS",
) -> FitGoalsConfig:
    """
    Build a validated ``FitGoalsConfig`` from defaults, file, environment and overrides.

    Args:
        config_file_path: Explicit TOML file. Must exist when given. When omitted,
            the default user config file is read if present.
        overrides: Highest-precedence settings, e.g. ``{"storage": {"backend": "memory"}}``.
        env_prefix: Prefix selecting relevant environment variables.

    Raises:
        ConfigError: If the file is missing or malformed, or validation fails.
    """
    settings_cls = _settings_class(_resolve_config_file(config_file_path), env_prefix)
    try:
        return settings_cls(**dict(overrides or {}))
    except (ValueError, OSError) as e:
        # ValidationError, SettingsError and TOMLDecodeError are all ValueErrors.
        raise ConfigError(f"Invalid fitgoals configuration: {e}")
