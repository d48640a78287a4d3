"""Line parser: applies one dialect to one raw line."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from dateutil import parser as date_parser

from logmon.dialects import Dialect


logger = logging.getLogger(__name__)


@dataclass
class Record:
    """Canonical parsed representation of one matched log line."""

    timestamp: datetime
    raw_line: str
    source_address: str | None = None
    http_method: str | None = None
    path: str | None = None
    protocol: str | None = None
    status_code: int | None = None
    bytes_transferred: int = 0
    severity: str | None = None
    message: str = ''
    referrer: str | None = None
    user_agent: str | None = None
    line_number: int | None = None  # 1-based, batch mode only

    @property
    def is_error_status(self) -> bool:
        return self.status_code is not None and self.status_code >= 400


@dataclass(frozen=True)
class Skip:
    """Outcome of a line that does not match the active dialect."""

    reason: str
    raw_line: str
    line_number: int | None = None
    blank: bool = False  # Empty lines are skipped silently


def normalize_timestamp(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_timestamp(text: str, timestamp_format: str | None = None) -> datetime:
    """Parse a timestamp field, falling back to the current time.

    A malformed timestamp never rejects the line; it is logged at debug level
    and replaced with "now".
    """
    try:
        if timestamp_format:
            parsed = datetime.strptime(text, timestamp_format)
        else:
            # Ruby logger stamps carry the pid: "2023-12-25T10:00:01.123 #42"
            parsed = date_parser.parse(text.split(' #', 1)[0])
    except (ValueError, OverflowError) as e:
        logger.debug(f'Unparseable timestamp {text!r}, using current time: {e}')
        return datetime.now(UTC)
    return normalize_timestamp(parsed)


def _decode_bytes(value: str | None) -> int:
    if not value or value == '-':
        return 0
    return int(value)


def parse(dialect: Dialect, raw_line: str, line_number: int | None = None) -> Record | Skip:
    """Parse one raw line with the given dialect.

    Args:
        dialect: Active dialect
        raw_line: Line content, with or without its trailing newline
        line_number: 1-based line number (batch mode only)

    Returns:
        A Record when the line matches the dialect's rule, a Skip otherwise.
    """
    line = raw_line.rstrip('\r\n')
    if not line.strip():
        return Skip(reason='blank line', raw_line=line, line_number=line_number, blank=True)

    rule = dialect.rule
    match = rule.pattern.match(line)
    if not match:
        return Skip(reason=f'line does not match {dialect.label} format', raw_line=line, line_number=line_number)

    groups = match.groupdict()
    timestamp = parse_timestamp(groups['timestamp'], rule.timestamp_format)

    if rule.web:
        return Record(
            timestamp=timestamp,
            raw_line=line,
            source_address=groups['source_address'],
            http_method=groups['http_method'],
            path=groups['path'],
            protocol=groups['protocol'],
            status_code=int(groups['status_code']),
            bytes_transferred=_decode_bytes(groups['bytes_transferred']),
            message=f'{groups["http_method"]} {groups["path"]}',
            referrer=groups.get('referrer'),
            user_agent=groups.get('user_agent'),
            line_number=line_number,
        )

    return Record(
        timestamp=timestamp,
        raw_line=line,
        severity=groups['severity'].upper(),
        message=groups['message'],
        line_number=line_number,
    )
