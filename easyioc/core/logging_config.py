"""
Centralized logging configuration.

Every container module logs through `get_logger(__name__)`, so all records
live under the `easyioc` logger. The hosting application owns the root
configuration; `set_container_log_level` tunes the container's verbosity
without touching the rest of the application.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

CONTAINER_LOGGER = 'easyioc'
DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _to_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(
    level: Union[str, int] = 'INFO',
    format_string: Optional[str] = None,
    log_file: Optional[str] = None
) -> None:
    """
    Configure root logging for a process embedding the container.

    Args:
        level: Logging level name or number; unknown names fall back to INFO
        format_string: Record format (DEFAULT_FORMAT if None)
        log_file: Optional file receiving the same records as stdout
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=_to_level(level),
        format=format_string or DEFAULT_FORMAT,
        handlers=handlers,
        force=True  # Override any existing configuration
    )


def set_container_log_level(level: Union[str, int]) -> None:
    """Set the level of the container's loggers only."""
    logging.getLogger(CONTAINER_LOGGER).setLevel(_to_level(level))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module (pass `__name__`)."""
    return logging.getLogger(name)


def configure_from_settings(settings) -> None:
    """
    Configure logging from a settings object.

    Args:
        settings: Object with `log_level` and `log_format`
    """
    setup_logging(level=settings.log_level, format_string=settings.log_format)
