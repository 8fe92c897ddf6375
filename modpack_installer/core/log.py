"""
Logging setup for the installer launcher.

Library modules only call logging.getLogger(__name__); handlers are
attached here, once, by install.py.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "[%(asctime)s]: %(message)s"


class InstallerLogFormatter(logging.Formatter):
    """Formats timestamps like "3/7/2025 4:05:09 PM"."""

    def formatTime(self, record, datefmt=None):
        ct = self.converter(record.created)
        hour = ct.tm_hour % 12 or 12
        suffix = "AM" if ct.tm_hour < 12 else "PM"
        return (
            f"{ct.tm_mon}/{ct.tm_mday}/{ct.tm_year} "
            f"{hour}:{ct.tm_min:02d}:{ct.tm_sec:02d} {suffix}"
        )


def setup_logging(
    log_path: Optional[Path] = None,
    console: bool = False,
    verbose: bool = False,
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        log_path: File to append log entries to (None disables file logging)
        console: Also echo log records to stderr
        verbose: Include DEBUG records (per-file staleness decisions)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("modpack_installer")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = InstallerLogFormatter(LOG_FORMAT)

    if log_path is not None:
        try:
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        except OSError as e:
            print(f"Failed to write to log: {e}")
        else:
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(stream_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return logger
