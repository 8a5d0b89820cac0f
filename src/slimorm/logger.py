"""
Logging setup shared by every slimorm module.

Modules obtain their logger with ``get_logger(__name__)``. The first call
attaches a single stream handler to the ``slimorm`` logger, using the level
from ``config.log_level``. The root logger is left alone so applications keep
control of their own logging.
"""

import logging
import sys

from slimorm.config import config

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_initialized = False


def _init_logging() -> None:
    """Configure the package logger once."""
    global _initialized
    if _initialized:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    package_logger = logging.getLogger("slimorm")
    package_logger.setLevel(config.log_level)
    package_logger.addHandler(handler)
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger instance.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        A configured logging.Logger.
    """
    _init_logging()
    return logging.getLogger(name)
