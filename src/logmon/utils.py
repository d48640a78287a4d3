"""Utility functions for logmon"""

import logging
import os


DEFAULT_LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def get_int_env(key: str, default: int) -> int:
    """Get integer value from environment variable, return default if not set or invalid."""
    val = os.getenv(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def get_str_env(key: str, default: str) -> str:
    """
    Get string from environment variable, return default if not set.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        String value or default
    """
    return os.getenv(key, default)


def default_error_threshold() -> int:
    return get_int_env('LOGMON_ERROR_THRESHOLD', 10)


def default_high_alert_threshold() -> int:
    return get_int_env('LOGMON_HIGH_ALERT_THRESHOLD', 5)


def default_poll_interval_ms() -> int:
    return get_int_env('LOGMON_POLL_INTERVAL_MS', 1000)


def default_alert_window_seconds() -> int:
    return get_int_env('LOGMON_ALERT_WINDOW_SECONDS', 60)


def human_readable_size(size_bytes: int) -> str:
    """Convert bytes to human-readable format."""
    size = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024:
            return f'{size:.2f} {unit}'
        size /= 1024
    return f'{size:.2f} TB'


def setup_logging(level: str | None = None) -> None:
    """
    Configure root logging for CLI usage.

    Level priority: explicit argument, then LOGMON_LOG_LEVEL, then WARNING.
    Unknown level names fall back to WARNING.
    """
    level_name = (level or get_str_env('LOGMON_LOG_LEVEL', 'WARNING')).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING
    logging.basicConfig(level=numeric_level, format=DEFAULT_LOG_FORMAT)
