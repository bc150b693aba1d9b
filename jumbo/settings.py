"""Process configuration using pydantic-settings."""

import logging
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class JumboSettings(BaseSettings):
    """Configuration for one jumbo process.

    All settings can be configured via environment variables with the
    JUMBO_ prefix. For example:
    - JUMBO_DATA_DIR=/path/to/project/.jumbo
    - JUMBO_LOG_LEVEL=DEBUG
    - JUMBO_GOAL_CHAINING_ENABLED=false

    Attributes:
        data_dir: Directory holding everything jumbo persists for a project.
        events_dirname: Name of the directory, inside data_dir, holding the
            event stream files.
        log_level: Level applied to the ``jumbo`` logger.
        goal_chaining_enabled: Whether new goals may be linked to the goal
            they follow.

    Example:
        >>> settings = JumboSettings(data_dir=tmp_path)
        >>> settings.events_dir
        PosixPath('.../events')
    """

    data_dir: Path = Path(".jumbo")
    events_dirname: str = "events"
    log_level: LogLevel = "WARNING"
    goal_chaining_enabled: bool = True

    model_config = {"env_prefix": "JUMBO_"}

    @property
    def events_dir(self) -> Path:
        return self.data_dir / self.events_dirname


def configure_logging(settings: JumboSettings) -> None:
    """Apply the configured log level to the ``jumbo`` logger hierarchy."""
    logging.getLogger("jumbo").setLevel(settings.log_level)
