"""
Logging helpers for applications embedding the scoring core.

The core modules only call ``logging.getLogger(__name__)``; they never touch
handlers. A host process calls ``configure_logging`` once at startup to get
the aligned, millisecond-stamped format:

    2026-01-15 09:30:12,481 | INFO     | archetype_registry.py:88 | Loaded 5 need archetypes
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(filename)s:%(lineno)d | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S,%f"

# Root package logger; every core module logs beneath it
PACKAGE_LOGGER = "civic_scoring"


class MillisecondsFormatter(logging.Formatter):
    """Formatter that renders ``%f`` in the date format as milliseconds."""

    def formatTime(self, record, datefmt=None):  # noqa: N802 - must match parent class method name
        ct = datetime.fromtimestamp(record.created)
        if datefmt and "%f" in datefmt:
            return ct.strftime(datefmt.replace(",%f", "")) + f",{int(record.msecs):03d}"
        if datefmt:
            return ct.strftime(datefmt)
        return ct.strftime("%Y-%m-%d %H:%M:%S") + f",{int(record.msecs):03d}"


def format_fields(message: str, **fields: Any) -> str:
    """Append ``[key=value ...]`` structured data to a message.

    format_fields("Scored policy", policy_id="x", overall=7.2)
    → "Scored policy [policy_id=x overall=7.2]"
    """
    if not fields:
        return message
    formatted = " ".join(f"{k}={v}" for k, v in fields.items())
    return f"{message} [{formatted}]"


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Attach console (and optional file) handlers to the package logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        log_file: Optional log file name
        log_dir: Directory for the log file (defaults to ./logs)

    Returns:
        The configured ``civic_scoring`` logger
    """
    level = getattr(logging, log_level.upper())
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    # Calling twice must not duplicate output
    if logger.handlers:
        logger.handlers.clear()

    formatter = MillisecondsFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = log_dir or Path.cwd() / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / log_file)
        file_handler.setLevel(logging.DEBUG)  # Log everything to file
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info(format_fields("Logging to file", path=log_dir / log_file))

    return logger
