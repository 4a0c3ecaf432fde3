"""
Logging setup for sqlsend.

Module loggers hang off the "sqlsend" logger. A log file is written when
logging is enabled in the config, and debug level also echoes to stderr.
"""

import logging
from pathlib import Path
from typing import Optional

from .config import LoggingConfig

LEVEL_MAP = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """Configure the "sqlsend" logger. Calling it again replaces the handlers."""
    config = config or LoggingConfig()
    logger = logging.getLogger("sqlsend")
    level = LEVEL_MAP.get(config.level.lower(), logging.INFO)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    if config.enabled:
        log_path = Path(config.path).expanduser()
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not open log file {log_path}: {e}")
        else:
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    # Console handler for debug mode
    if level == logging.DEBUG:
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return logger
