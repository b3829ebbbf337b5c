"""
dcdesign/logging_config.py
==========================
Logging setup for the runner and for host applications embedding dcdesign.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the process entry point.
"""

from __future__ import annotations

import logging
import logging.handlers
from datetime import datetime
from pathlib import Path

DETAILED_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SIMPLE_FORMAT: str = "%(levelname)s - %(message)s"
DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    log_level: str = "INFO",
    log_dir: str | None = "logs",
    app_name: str = "dcdesign",
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """Configure the root logger with a console handler and a rotating file handler.

    Args:
        log_level:     Console/root level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir:       Directory for log files; ``None`` disables file logging.
        app_name:      Prefix of the log file name.
        max_file_size: Maximum size of each log file [bytes].
        backup_count:  Number of rotated files to keep.

    Returns:
        The configured root logger.

    Raises:
        ValueError: If ``log_level`` is not a known level name.
    """
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level!r}")

    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
    logger.addHandler(console_handler)

    log_file = None
    if log_dir is not None:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = Path(log_dir) / f"{app_name}_{timestamp}.log"
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    logger.info("Logging configured - Level: %s, File: %s", log_level, log_file)
    return logger


def set_log_level(level: str) -> None:
    """Change the root level and every console handler's level."""
    numeric_level = getattr(logging, level.upper(), None)
    if isinstance(numeric_level, int):
        root = logging.getLogger()
        root.setLevel(numeric_level)
        for handler in root.handlers:
            if type(handler) is logging.StreamHandler:
                handler.setLevel(numeric_level)
