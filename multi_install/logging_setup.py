"""Logger configuration for the plugin process."""

import os
import sys
import logging
from typing import Optional

from .utils.paths import LOG_PATH

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def configure_logging(level: str = "INFO", log_file: Optional[str] = LOG_PATH) -> logging.Logger:
    """Attach file and stdout handlers to the package logger.

    Safe to call more than once: handlers from a previous call are replaced.
    """
    logger = logging.getLogger("multi_install")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file:
        try:
            os.makedirs(os.path.dirname(log_file), exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"[INIT] Could not open log file {log_file}: {e}")

    return logger
