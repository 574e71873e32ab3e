# src/carve/logging_setup.py
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

from carve.config import LoggingConfig


def _build_handlers(log_settings: LoggingConfig) -> List[logging.Handler]:
    # stdout carries --schema output, so the console gets stderr
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_settings.log_to_file:
        log_file_path = Path(log_settings.log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_file_path,
                maxBytes=log_settings.rotation_size_mb * 1024 * 1024,
                backupCount=log_settings.rotation_backup_count,
            )
        )
    return handlers


def setup_logging(log_settings: LoggingConfig, verbose: bool = False):
    """
    Route every carve logger through the root logger.

    Replaces any handlers already installed on the root logger. `verbose`
    lowers the level to DEBUG regardless of the configured level, which is
    what surfaces the per-line "does not match pattern" messages.
    """
    level = logging.DEBUG if verbose else log_settings.level.upper()
    formatter = logging.Formatter(log_settings.format)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in _build_handlers(log_settings):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    root.debug(f"Logging configured at {logging.getLevelName(root.level)}")
