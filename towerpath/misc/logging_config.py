"""
Logging setup for the ``towerpath`` logger namespace.

Every component logger is a child of ``towerpath``, so a host game or level
editor can route, silence or capture the engine's output in one call to
``setup_logger``.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

TOWERPATH_LOGGER_NAME = "towerpath"
DEFAULT_LOG_LEVEL = logging.INFO
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _attach(logger: logging.Logger, handler: logging.Handler, level: int):
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def setup_logger(name: str = TOWERPATH_LOGGER_NAME, level: int = DEFAULT_LOG_LEVEL,
                 log_file: Optional[str] = None, console: bool = True) -> logging.Logger:
    """
    (Re)configure a logger, replacing whatever handlers it had.

    Args:
        name: Logger name, ``towerpath`` by default
        level: Level for the logger and its handlers
        log_file: Append output to this file as well; parent folders are created
        console: Write to stdout

    Examples:
        >>> logger = setup_logger(level=logging.DEBUG)
        >>> logger = setup_logger(log_file="logs/balancing_session.log", console=False)
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    if console:
        _attach(logger, logging.StreamHandler(sys.stdout), level)
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        _attach(logger, logging.FileHandler(log_file, mode='a'), level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``towerpath`` or ``towerpath.<name>``, configuring the namespace on first use."""
    if not logging.getLogger(TOWERPATH_LOGGER_NAME).handlers:
        setup_logger()
    return logging.getLogger(f"{TOWERPATH_LOGGER_NAME}.{name}" if name else TOWERPATH_LOGGER_NAME)
