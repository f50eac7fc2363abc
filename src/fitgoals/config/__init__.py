# src/fitgoals/config/__init__.py
"""
Configuration package for fitgoals.

Configuration sources:
    - Packaged defaults: the Pydantic models in ``models.py``
    - User config: ~/.config/fitgoals/config.toml
    - Custom config: ``load_config(config_file_path=...)``

Environment variables:
    - Prefix: FITGOALS_
    - Nested keys use double underscores: FITGOALS_PROGRESS__WEEK_START=sunday
"""

from .loader import load_config
from .models import FitGoalsConfig, LoggingConfig, ProgressConfig, StorageConfig

__all__ = ["FitGoalsConfig", "LoggingConfig", "ProgressConfig", "StorageConfig", "load_config"]
