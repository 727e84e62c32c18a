"""
Component logger for towerpath.

Each engine part (builder, validator, retry loop, error tracker) gets a
``TowerPathLogger`` tagged with its name. Warnings and above are always
emitted; INFO and DEBUG only when the component was built with
``verbose=True``. Output goes through the ``towerpath`` logging namespace
set up in ``logging_config``.
"""

import logging
from enum import Enum
from typing import Optional

from .logging_config import get_logger


class LogLevel(Enum):
    """Log level enumeration."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4

    @property
    def stdlib_level(self) -> int:
        return getattr(logging, self.name)

    @property
    def tag(self) -> str:
        return {"INFO": "", "WARNING": "Warning:"}.get(self.name, f"{self.name}:")


class TowerPathLogger:
    """
    Named logger used by every towerpath component.

    Usage:
        logger = TowerPathLogger(verbose=True, name="Engine")
        logger.info("Path generated for level 3")
        logger.warning("Unknown theme 'lava', using default")
    """

    def __init__(self, verbose: bool = True, name: Optional[str] = None, min_level: LogLevel = LogLevel.INFO):
        self.verbose = verbose
        self.name = name
        self.min_level = min_level
        self._logger = get_logger(name.lower() if name else None)
        if verbose and min_level == LogLevel.DEBUG:
            self._logger.setLevel(logging.DEBUG)

    def _format_message(self, level: LogLevel, message: str) -> str:
        parts = ["[towerpath]"]
        if self.name:
            parts.append(f"[{self.name}]")
        if level.tag:
            parts.append(level.tag)
        parts.append(message)
        return " ".join(parts)

    def _should_log(self, level: LogLevel) -> bool:
        if level.value >= LogLevel.WARNING.value:
            return True
        return self.verbose and level.value >= self.min_level.value

    def log(self, message: str, level: LogLevel = LogLevel.INFO):
        """Log ``message`` at ``level``, subject to the verbose filter."""
        if self._should_log(level):
            self._logger.log(level.stdlib_level, self._format_message(level, message))

    def debug(self, message: str):
        self.log(message, LogLevel.DEBUG)

    def info(self, message: str):
        self.log(message, LogLevel.INFO)

    def warning(self, message: str):
        """Always shown."""
        self.log(message, LogLevel.WARNING)

    def error(self, message: str):
        self.log(message, LogLevel.ERROR)

    def critical(self, message: str):
        self.log(message, LogLevel.CRITICAL)


def create_logger(verbose: bool = True, name: Optional[str] = None) -> TowerPathLogger:
    """
    Factory function to create a logger instance.

    Args:
        verbose: If False, suppresses INFO and DEBUG messages
        name: Component name (e.g., "PathEngine", "Retry")
    """
    return TowerPathLogger(verbose=verbose, name=name)
