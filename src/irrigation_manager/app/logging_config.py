"""Logging configuration for irrigation-app.

The TUI owns the terminal, so records only ever go to a session log file.
An oversized file from earlier sessions is moved aside when the app starts.
"""

import logging
import os
from pathlib import Path

LOGGER_NAMESPACE = "irrigation_app"
LOG_FILENAME = "irrigation_app.log"

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-40s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _rotate_log_if_needed(
    log_file: Path,
    max_bytes: int = MAX_LOG_BYTES,
    backup_count: int = LOG_BACKUP_COUNT,
) -> None:
    """Move an oversized log aside before a new session appends to it.

    Backups are numbered from newest (``.1``) to oldest (``.<backup_count>``);
    the oldest one is discarded to make room.

    Args:
        log_file: Current session log
        max_bytes: Size at which the log is rotated
        backup_count: Backups kept next to the log
    """
    if not log_file.exists() or log_file.stat().st_size < max_bytes:
        return

    if backup_count < 1:
        log_file.unlink()
        return

    backups = [log_file.with_name(f"{log_file.name}.{n}") for n in range(1, backup_count + 1)]
    backups[-1].unlink(missing_ok=True)
    # Walk from oldest to newest so no backup is overwritten
    for newer, older in zip(reversed(backups[:-1]), reversed(backups[1:])):
        if newer.exists():
            newer.rename(older)
    log_file.rename(backups[0])


def setup_logging(log_dir: Path, level: int = logging.DEBUG) -> logging.Logger:
    """Send the irrigation_app logger tree to a session log file.

    Args:
        log_dir: Directory holding the log and its backups (created if needed)
        level: Lowest level written

    Returns:
        The root irrigation_app logger
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILENAME
    _rotate_log_if_needed(log_file)

    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    logger = logging.getLogger(LOGGER_NAMESPACE)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.addHandler(handler)
    logger.setLevel(level)
    # Never reach the root logger, which may write to the terminal
    logger.propagate = False

    logger.info(f"irrigation-app session started (pid {os.getpid()}), logging to {log_file}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module, e.g. get_logger(__name__)."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
