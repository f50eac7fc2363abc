# src/fitgoals/api.py
"""
Core API facade for fitgoals.

``FitGoals.create()`` loads configuration, builds the storage backend and
wires the store, engine, directory and processor together, passing each
its own component logger.
"""

from typing import Any, Dict, Optional

from .activity import ActivitySource
from .config import FitGoalsConfig, load_config
from .directory import Clock, GoalDirectory, utc_now
from .engine import ProgressEngine
from .logging_config import LoggingManager, configure_logging, get_component_logger
from .processor import WorkoutEventProcessor
from .storage import BlobStorage, create_blob_storage
from .store import GoalProgressStore


class FitGoals:
    """
    Entry point bundling the goal and progress components.

    Use the ``FitGoals.create()`` classmethod; the constructor only stores
    already-built components.
    """

    def __init__(
        self,
        config: FitGoalsConfig,
        store: GoalProgressStore,
        engine: ProgressEngine,
        directory: GoalDirectory,
        processor: WorkoutEventProcessor,
        logging_manager: Optional[LoggingManager] = None,
    ) -> None:
        self.config = config
        self.store = store
        self.engine = engine
        self.directory = directory
        self.processor = processor
        self._logging_manager = logging_manager
        self._logger = get_component_logger("api")

    @classmethod
    async def create(
        cls,
        config: Optional[FitGoalsConfig] = None,
        config_file_path: Optional[str] = None,
        config_overrides: Optional[Dict[str, Any]] = None,
        storage: Optional[BlobStorage] = None,
        activity_source: Optional[ActivitySource] = None,
        clock: Clock = utc_now,
        setup_logging: bool = False,
    ) -> "FitGoals":
        """
        Build and load a ready-to-use instance.

        Args:
            config: Complete configuration; when omitted it is loaded with
                ``load_config(config_file_path, config_overrides)``.
            config_file_path: TOML configuration file.
            config_overrides: Highest-precedence configuration values.
            storage: Storage backend overriding ``config.storage.backend``.
            activity_source: Source for calendar progress.
            clock: Current-time source shared by directory and processor.
            setup_logging: Install handlers from ``config.logging``.

        Raises:
            ConfigError: If configuration is invalid.
        """
        if config is None:
            config = load_config(config_file_path=config_file_path, overrides=config_overrides)

        logging_manager = configure_logging(config.logging) if setup_logging else None
        logger = get_component_logger("api")

        if storage is None:
            storage = create_blob_storage(config.storage, get_component_logger("storage"))
        store = GoalProgressStore(
            storage,
            logger=get_component_logger("store"),
            goals_key=config.storage.goals_key,
            progress_key=config.storage.progress_key,
        )
        engine = ProgressEngine.from_config(config.progress, get_component_logger("engine"))
        directory = GoalDirectory(
            store,
            engine,
            logger=get_component_logger("directory"),
            activity_source=activity_source,
            clock=clock,
        )
        processor = WorkoutEventProcessor(
            store, directory, logger=get_component_logger("processor"), clock=clock
        )

        await directory.reload()
        logger.debug(
            "fitgoals ready: %d goals, %d progress records", len(directory.goals), len(directory.progress)
        )
        return cls(config, store, engine, directory, processor, logging_manager)

    async def close(self) -> None:
        await self.store.close()
        if self._logging_manager is not None:
            self._logging_manager.shutdown()
        self._logger.debug("fitgoals closed")
