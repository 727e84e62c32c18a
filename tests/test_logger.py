import logging

from towerpath.misc.logger import LogLevel, TowerPathLogger, create_logger
from towerpath.misc.logging_config import TOWERPATH_LOGGER_NAME, get_logger


def test_child_loggers_share_namespace() -> None:
    assert get_logger("engine").name == "towerpath.engine"
    assert get_logger().name == TOWERPATH_LOGGER_NAME


def test_quiet_logger_still_reports_warnings(caplog) -> None:
    logger = create_logger(verbose=False, name="Builder")
    with caplog.at_level(logging.DEBUG, logger=TOWERPATH_LOGGER_NAME):
        logger.info("hidden")
        logger.warning("walk stopped early")
    messages = [r.getMessage() for r in caplog.records]
    assert messages == ["[towerpath] [Builder] Warning: walk stopped early"]


def test_verbose_logger_formats_levels(caplog) -> None:
    logger = TowerPathLogger(verbose=True, name="Engine")
    with caplog.at_level(logging.DEBUG, logger=TOWERPATH_LOGGER_NAME):
        logger.info("ready")
        logger.log("boom", LogLevel.CRITICAL)
    messages = [r.getMessage() for r in caplog.records]
    assert messages == ["[towerpath] [Engine] ready", "[towerpath] [Engine] CRITICAL: boom"]
    assert caplog.records[-1].levelno == logging.CRITICAL
