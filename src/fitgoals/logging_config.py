# src/fitgoals/logging_config.py
"""
Logging configuration for fitgoals.

Provides a centralized logging setup driven by ``LoggingConfig``:

- Console logging with display-level gating (see DisplayFilter)
- Optional file logging with size-based rotation
- Per-component log level overrides

Key concepts:

    **Display filter**: When ``console_enabled=False`` (the default), the
    console handler still exists but only passes through log records that
    carry ``extra={"display": True}``. This lets operational messages
    (e.g. "Completed progress updates for 3 goals") reach the user while
    debug chatter stays quiet.

    **Component loggers**: fitgoals components never reach for a
    module-level logger. Each one receives a ``logging.Logger`` in its
    constructor; ``get_component_logger`` builds the conventional
    ``fitgoals.<component>`` logger for that purpose.

Usage:
    from fitgoals.logging_config import configure_logging, log_display

    configure_logging(config.logging, app_name="fitgoals")
    logger = get_component_logger("store")
    log_display(logger, logging.INFO, "Loaded %d goals", count)
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from .config.models import LoggingConfig

ROOT_LOGGER_NAME = "fitgoals"


def _level(name: str, default: int) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else default


# ---------------------------------------------------------------------------
# DisplayFilter
# ---------------------------------------------------------------------------


class DisplayFilter(logging.Filter):
    """Controls which log records pass through to the console handler.

    When console is globally enabled everything passes and the handler's
    own level does the filtering. Otherwise only records with
    ``record.display = True`` at or above ``display_min_level`` pass.
    """

    def __init__(
        self,
        console_globally_enabled: bool = False,
        display_min_level: int = logging.INFO,
    ) -> None:
        super().__init__()
        self.console_globally_enabled = console_globally_enabled
        self.display_min_level = display_min_level

    def filter(self, record: logging.LogRecord) -> bool:
        if self.console_globally_enabled:
            return True

        if getattr(record, "display", False):
            return record.levelno >= self.display_min_level

        return False


# ---------------------------------------------------------------------------
# LoggingManager
# ---------------------------------------------------------------------------


class LoggingManager:
    """
    Installs fitgoals handlers on the ``fitgoals`` logger.

    Handlers are attached to the package logger rather than the root logger
    so that embedding applications keep control of their own logging.
    Reconfiguring replaces the handlers this manager installed earlier.
    """

    def __init__(self, logger_name: str = ROOT_LOGGER_NAME) -> None:
        self._logger_name = logger_name
        self._console_handler: Optional[logging.Handler] = None
        self._file_handler: Optional[logging.Handler] = None
        self._display_filter: Optional[DisplayFilter] = None
        self._log_file_path: Optional[Path] = None

    @property
    def log_file_path(self) -> Optional[Path]:
        return self._log_file_path

    @property
    def console_handler(self) -> Optional[logging.Handler]:
        return self._console_handler

    def configure(self, config: LoggingConfig, app_name: str = "fitgoals") -> Optional[Path]:
        """
        Apply ``config`` to the package logger.

        Returns:
            Path of the log file, or None when file logging is disabled or unavailable.
        """
        package_logger = logging.getLogger(self._logger_name)
        self._remove_handlers(package_logger)
        package_logger.setLevel(logging.DEBUG)

        self._display_filter = DisplayFilter(
            console_globally_enabled=config.console_enabled,
            display_min_level=_level(config.display_min_level, logging.INFO),
        )
        self._console_handler = logging.StreamHandler(sys.stderr)
        if config.console_enabled:
            self._console_handler.setLevel(_level(config.console_level, logging.WARNING))
        else:
            # The filter is the sole gate when the console is "off".
            self._console_handler.setLevel(logging.DEBUG)
        self._console_handler.setFormatter(logging.Formatter(config.console_format))
        self._console_handler.addFilter(self._display_filter)
        package_logger.addHandler(self._console_handler)

        self._log_file_path = None
        if config.file_enabled:
            self._file_handler, self._log_file_path = self._create_file_handler(config, app_name)
            if self._file_handler:
                package_logger.addHandler(self._file_handler)

        for component_name, level_str in config.components.items():
            logging.getLogger(component_name).setLevel(_level(level_str, logging.INFO))

        package_logger.debug("Logging configured (file: %s)", self._log_file_path)
        return self._log_file_path

    def _remove_handlers(self, package_logger: logging.Logger) -> None:
        for handler in (self._console_handler, self._file_handler):
            if handler is not None:
                package_logger.removeHandler(handler)
                handler.close()
        self._console_handler = None
        self._file_handler = None

    def _create_file_handler(
        self, config: LoggingConfig, app_name: str
    ) -> tuple[Optional[logging.Handler], Optional[Path]]:
        log_dir = Path(os.path.expanduser(config.file_directory))
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            sys.stderr.write(f"Warning: Cannot create log directory {log_dir}: {e}\n")
            return None, None

        try:
            filename = config.file_name.format(app=app_name)
        except (KeyError, ValueError):
            filename = f"{app_name}.log"
        log_file_path = log_dir / filename

        try:
            handler = RotatingFileHandler(
                log_file_path,
                maxBytes=config.rotation_max_bytes,
                backupCount=config.rotation_backup_count,
                encoding="utf-8",
            )
        except OSError as e:
            sys.stderr.write(f"Warning: Cannot create log file {log_file_path}: {e}\n")
            return None, None

        handler.setLevel(_level(config.file_level, logging.DEBUG))
        handler.setFormatter(logging.Formatter(config.file_format))
        return handler, log_file_path

    def shutdown(self) -> None:
        """Detach and close the handlers installed by this manager."""
        self._remove_handlers(logging.getLogger(self._logger_name))


# ---------------------------------------------------------------------------
# Public module-level functions
# ---------------------------------------------------------------------------


def configure_logging(
    config: Optional[LoggingConfig] = None,
    app_name: str = "fitgoals",
    manager: Optional[LoggingManager] = None,
) -> LoggingManager:
    """
    Configure fitgoals logging and return the manager that owns the handlers.

    Example:
        manager = configure_logging(LoggingConfig(console_enabled=True, console_level="DEBUG"))
    """
    manager = manager or LoggingManager()
    manager.configure(config or LoggingConfig(), app_name=app_name)
    return manager


def get_component_logger(component: str) -> logging.Logger:
    """Return the ``fitgoals.<component>`` logger to inject into a component."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}")


def log_display(
    logger: logging.Logger,
    level: int,
    msg: str,
    *args: Any,
    **kwargs: Any,
) -> None:
    """Log a message that also appears on console even in silent mode.

    Sets ``extra={"display": True}`` (merged with any caller-provided
    ``extra``) so the record passes the :class:`DisplayFilter`.
    """
    extra = kwargs.pop("extra", None) or {}
    extra["display"] = True
    kwargs["extra"] = extra
    logger.log(level, msg, *args, **kwargs)
