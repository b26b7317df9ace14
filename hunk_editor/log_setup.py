"""
Logging setup — a file logger for the hunk engine.

Library modules only call ``logging.getLogger(__name__)``; nothing is
configured on import.  Applications that want the engine's debug trail call
:func:`setup_logger` once.
"""

import logging
import os
from datetime import datetime

LOGGER_NAME = "hunk_editor"


def setup_logger(log_dir: str | None = None) -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    if log_dir is None:
        from .config import get_config

        log_dir = get_config().LOG_DIR

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # One file handler per logger, however often this is called
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and getattr(handler, "_hunk_editor", False):
            return logger

    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"hunk_{timestamp}.log")

    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    fh._hunk_editor = True
    logger.addHandler(fh)

    return logger
