"""Pytest configuration and shared fixtures for logmon tests.

This module provides an auto-use fixture that keeps LOGMON_* environment
variables from leaking into tests, plus helpers for building log lines.
"""

from datetime import UTC, datetime, timedelta

import pytest


LOGMON_ENV_VARS = (
    'LOGMON_ERROR_THRESHOLD',
    'LOGMON_HIGH_ALERT_THRESHOLD',
    'LOGMON_POLL_INTERVAL_MS',
    'LOGMON_ALERT_WINDOW_SECONDS',
    'LOGMON_LOG_LEVEL',
)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Auto-use fixture that clears logmon configuration from the environment.

    This ensures thresholds and intervals always start from their built-in
    defaults unless a test sets them explicitly.
    """
    for name in LOGMON_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def web_line(
    ip: str = '192.168.1.100',
    path: str = '/index.html',
    status: int | str = 200,
    size: int | str = 1024,
    method: str = 'GET',
    timestamp: str = '25/Dec/2023:10:00:01 +0000',
    agent: bool = False,
) -> str:
    """Build an Apache combined/common log line."""
    line = f'{ip} - - [{timestamp}] "{method} {path} HTTP/1.1" {status} {size}'
    if agent:
        line += ' "-" "Mozilla/5.0"'
    return line


class FakeClock:
    """Manually advanced clock for alert timestamps."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def log_file(tmp_path):
    """Factory fixture writing lines to a log file and returning its path."""

    def _write(lines: list[str], name: str = 'access.log') -> str:
        path = tmp_path / name
        path.write_text(''.join(f'{line}\n' for line in lines))
        return str(path)

    return _write
