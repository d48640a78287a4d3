"""Dialect registry: the line formats logmon knows how to read.

Each dialect carries its own extraction rule. Adding a format means adding a
member to ``Dialect``; nothing else branches on the format name.
"""

import re
from dataclasses import dataclass
from enum import Enum


# Web access log timestamp: 25/Dec/2023:10:00:01 +0000
WEB_TIMESTAMP_FORMAT = '%d/%b/%Y:%H:%M:%S %z'

_WEB_PREFIX = (
    r'^(?P<source_address>\S+) (?P<ident>\S+) \S+ '
    r'\[(?P<timestamp>[^\]]+)\] '
    r'"(?P<http_method>\S+) (?P<path>\S+) (?P<protocol>[^"\s]+)" '
    r'(?P<status_code>\d{3}) (?P<bytes_transferred>\d+|-)'
)


@dataclass(frozen=True)
class DialectRule:
    """Line-matching rule and field slots for a single dialect.

    Attributes:
        pattern: Compiled regex with named groups, one per field slot
        fields: Field slots this dialect fills
        timestamp_format: strptime format for the timestamp slot, or None to
                          use the lenient date parser
        web: True for access-log dialects that carry status codes and addresses
    """

    pattern: re.Pattern
    fields: tuple[str, ...]
    timestamp_format: str | None = None
    web: bool = False


class Dialect(Enum):
    """Known line formats."""

    APACHE = DialectRule(
        pattern=re.compile(_WEB_PREFIX + r'(?: "(?P<referrer>[^"]*)" "(?P<user_agent>[^"]*)")?'),
        fields=(
            'timestamp',
            'source_address',
            'http_method',
            'path',
            'protocol',
            'status_code',
            'bytes_transferred',
        ),
        timestamp_format=WEB_TIMESTAMP_FORMAT,
        web=True,
    )
    NGINX = DialectRule(
        pattern=re.compile(
            r'^(?P<source_address>\S+) - \S+ '
            r'\[(?P<timestamp>[^\]]+)\] '
            r'"(?P<http_method>\S+) (?P<path>\S+) (?P<protocol>[^"\s]+)" '
            r'(?P<status_code>\d{3}) (?P<bytes_transferred>\d+|-) '
            r'"(?P<referrer>[^"]*)" "(?P<user_agent>[^"]*)"'
        ),
        fields=(
            'timestamp',
            'source_address',
            'http_method',
            'path',
            'protocol',
            'status_code',
            'bytes_transferred',
        ),
        timestamp_format=WEB_TIMESTAMP_FORMAT,
        web=True,
    )
    # Ruby/Rails logger ("E, [2023-12-25T10:00:01.123 #42] ERROR -- app: boom")
    # and plain "[2023-12-25 10:00:01] ERROR boom"
    APPLICATION = DialectRule(
        pattern=re.compile(
            r'^(?:[A-Z], )?\[(?P<timestamp>[^\]]+)\] +(?P<severity>[A-Za-z]+)'
            r'(?: -- [^:]*:)? (?P<message>.+)$'
        ),
        fields=('timestamp', 'severity', 'message'),
    )
    GENERIC = DialectRule(
        pattern=re.compile(
            r'^\[?(?P<timestamp>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}(?:[.,]\d+)?(?:Z|[+-]\d{2}:?\d{2})?)\]? '
            r'\[(?P<severity>\w+)\] (?P<message>.+)$'
        ),
        fields=('timestamp', 'severity', 'message'),
    )

    @property
    def rule(self) -> DialectRule:
        return self.value

    @property
    def label(self) -> str:
        """Lowercase dialect name used in exports and on the command line."""
        return self.name.lower()

    @classmethod
    def from_name(cls, name: 'str | Dialect') -> 'Dialect':
        """Look up a dialect by its (case-insensitive) name.

        Raises:
            ValueError: If no dialect has that name.
        """
        if isinstance(name, Dialect):
            return name
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f'Unknown dialect {name!r}; expected one of: {", ".join(dialect_names())}') from None


def dialect_names() -> list[str]:
    """Names accepted by ``Dialect.from_name``, in definition order."""
    return [dialect.label for dialect in Dialect]
