"""Shared utility functions for the guild export tool."""

import logging
import math
from datetime import datetime, timedelta
from pathlib import Path

import pytz

EPOCH = datetime(1970, 1, 1, tzinfo=pytz.UTC)


def setup_logger(
    name: str, log_file: Path | None = None, level: int | str = logging.INFO
) -> logging.Logger:
    """Set up logger with console and file handlers.

    Args:
        name: Logger name
        log_file: Optional path to log file
        level: Logging level (int constant or string name like 'DEBUG', 'INFO')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Convert string level to int if needed
    if isinstance(level, str):
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        logger.setLevel(numeric_level)
    else:
        logger.setLevel(level)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Avoid stacking handlers when the same logger is requested twice
    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def to_utc(value: datetime | int | float) -> datetime:
    """Convert a datetime or Unix timestamp (seconds) to an aware UTC datetime.

    Naive datetimes are assumed to already be in UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return pytz.UTC.localize(value)
        return value.astimezone(pytz.UTC)
    return from_ctime(value)


def from_ctime(ctime: int | float | str) -> datetime:
    """Convert a game `ctime` (Unix seconds, possibly a string) to UTC."""
    return EPOCH + timedelta(seconds=float(ctime))


def to_ctime(dt: datetime) -> float:
    """Convert a datetime to Unix seconds."""
    return (to_utc(dt) - EPOCH).total_seconds()


def to_epoch_ms(dt: datetime) -> int:
    """Whole milliseconds since the Unix epoch."""
    return (to_utc(dt) - EPOCH) // timedelta(milliseconds=1)


def from_epoch_ms(ms: int) -> datetime:
    return EPOCH + timedelta(milliseconds=ms)


def add_hours(dt: datetime, hours: float) -> datetime:
    return dt + timedelta(hours=hours)


def is_numeric_like(value) -> bool:
    """Check whether a value coerces to a number the way the game client does.

    Mirrors JavaScript ``Number()`` coercion of strings: blank strings are 0,
    ``Infinity`` and ``0x``/``0o``/``0b`` literals are numbers, ``NaN`` and
    Python-only spellings (``inf``, ``1_000``) are not.
    """
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float)):
        return not (isinstance(value, float) and math.isnan(value))
    if not isinstance(value, str):
        return False

    text = value.strip()
    if not text:
        return True
    if "_" in text:
        return False

    unsigned = text.lstrip("+-")
    if unsigned == "Infinity":
        return True
    if unsigned.lower() in ("nan", "inf", "infinity"):
        return False

    if text[:2].lower() in ("0x", "0o", "0b"):
        try:
            int(text, 0)
            return True
        except ValueError:
            return False

    try:
        float(text)
    except ValueError:
        return False
    return True


def to_number(value):
    """Convert a numeric-like value to int when integral, else float.

    Non numeric-like values are returned unchanged.
    """
    if isinstance(value, bool) or not is_numeric_like(value):
        return value
    if isinstance(value, (int, float)):
        number = value
    else:
        text = value.strip()
        if not text:
            return 0
        if text[:2].lower() in ("0x", "0o", "0b"):
            return int(text, 0)
        if text.lstrip("+-") == "Infinity":
            return float("-inf") if text.startswith("-") else float("inf")
        number = float(text)
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number
