"""Shared logger for the safe_expression package."""
import logging
import os


LOGGER_NAME = "safe_expression"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Create (or return) the package logger with a single stream handler.

    The level is read from the ``SAFE_EXPRESSION_LOG_LEVEL`` environment variable
    and falls back to INFO for unknown values.

    :param str name: Logger name

    :return: Configured logger
    :rtype: logging.Logger
    """
    log = logging.getLogger(name)
    level_name = os.environ.get("SAFE_EXPRESSION_LOG_LEVEL", "INFO").upper()
    log.setLevel(getattr(logging, level_name, logging.INFO))

    # Avoid duplicated handlers when the module is re-imported (e.g. by tests)
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)

    return log


logger = setup_logger()
