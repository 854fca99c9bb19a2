"""
Loggers for the plate_reader package and the web app.

get_logger(name) attaches a stdout handler (plus a file handler when asked) the
first time a name is requested. set_level(level) retunes every plate_reader and
webapp logger at once, which is how the CLI's --verbose turns on the per-contour
debug messages.
"""

import logging
import sys
from logging import Logger
from typing import Optional


def get_logger(name: str, level: int = logging.INFO, to_file: Optional[str] = None) -> Logger:
    """
    Returns a configured logger.

    Args:
        name: logger name (e.g., "plate_reader.plate_detection")
        level: logging level
        to_file: optional file path to write logs. If None, logs only to console.

    Returns:
        logging.Logger
    """
    logger = logging.getLogger(name)
    # Avoid adding multiple handlers if called multiple times
    if not logger.handlers:
        logger.setLevel(level)
        formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

        ch = logging.StreamHandler(sys.stdout)
        ch.setFormatter(formatter)
        logger.addHandler(ch)

        if to_file:
            fh = logging.FileHandler(to_file)
            fh.setFormatter(formatter)
            logger.addHandler(fh)

        logger.propagate = False

    return logger


def set_level(level: int) -> None:
    """Change the level of every plate_reader logger created so far (used by --verbose)."""
    for name in list(logging.Logger.manager.loggerDict):
        if name.startswith("plate_reader") or name.startswith("webapp"):
            logging.getLogger(name).setLevel(level)
