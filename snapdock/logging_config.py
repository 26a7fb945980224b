"""Logging setup for hosts that do not configure logging themselves.

Every module logs to ``logging.getLogger(__name__)`` under the ``snapdock``
namespace. Rejections go out at INFO and unexpected failures at ERROR with
their traceback, so INFO keeps a record of every snap attempt.

Example:
    >>> import logging
    >>> from snapdock.logging_config import setup_logging
    >>>
    >>> logger = setup_logging(logging.DEBUG, log_file="snapdock.log")
    >>> logger.name
    'snapdock'
"""

import logging
import sys

LOGGER_NAME = "snapdock"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> logging.Logger:
    """Attach console (and optional file) handlers to the package logger.

    Calling it again replaces the handlers instead of adding more.

    Args:
        level: Threshold for the logger and its handlers
        log_file: Path to append log lines to, if any

    Returns:
        The ``snapdock`` logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging initialized (level %s)", logging.getLevelName(level))
    return logger
