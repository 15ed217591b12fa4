from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "companion"
LOG_FILE = "companion.log"
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _level(name: str) -> int:
    value = logging.getLevelName(str(name).upper())
    return value if isinstance(value, int) else logging.INFO


def _file_handler(log_dir: str, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    os.makedirs(log_dir, exist_ok=True)
    h = RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE),
        maxBytes=int(max_bytes),
        backupCount=int(backup_count),
        encoding="utf-8",
        delay=True,
    )
    h.setFormatter(logging.Formatter(FILE_FORMAT))
    return h


def setup_logging(log_dir: str = "logs", level: str = "INFO", *, max_bytes: int = 1_000_000, backup_count: int = 5) -> logging.Logger:
    """
    Configure the process-wide `companion` logger: rotating file + console.
    Safe to call again; later calls only change the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level(level))
    logger.propagate = False

    kinds = {type(h) for h in logger.handlers}
    if RotatingFileHandler not in kinds:
        logger.addHandler(_file_handler(log_dir, max_bytes, backup_count))
    if logging.StreamHandler not in kinds:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        logger.addHandler(console)
    return logger


def get_logger(component: str) -> logging.Logger:
    """Child of the `companion` logger; shares its handlers."""
    return logging.getLogger(f"{LOGGER_NAME}.{component}")
