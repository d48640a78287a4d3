"""Base classes and data models for security checks."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from logmon.parser import Record
from logmon.stats import AggregateStatistics


class AlertType(str, Enum):
    """Kinds of alert a session can raise."""

    SUSPICIOUS_REQUEST = 'SuspiciousRequest'
    IP_BLACKLISTED = 'IpBlacklisted'
    APPLICATION_ERROR = 'ApplicationError'
    HIGH_ALERT_RATE = 'HighAlertRate'


@dataclass(frozen=True)
class Alert:
    """A security-relevant event. Alerts are append-only and never modified."""

    timestamp: datetime  # Wall-clock time the alert was raised
    type: AlertType
    message: str
    line_number: int | None = None  # 1-based, batch mode only


@dataclass(frozen=True)
class SuspiciousPattern:
    """Named rule flagging a path or message as an attack attempt."""

    name: str
    pattern: re.Pattern

    @classmethod
    def compile(cls, name: str, regex: str, flags: int = 0) -> 'SuspiciousPattern':
        return cls(name=name, pattern=re.compile(regex, flags))

    def search(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass
class DetectionContext:
    """Context provided to each security check for a record.

    Statistics have already been updated with the record when checks run.
    """

    record: Record
    statistics: AggregateStatistics
    blacklist: set[str]  # Owned by the detector; checks may add to it
    now: datetime  # Alert timestamp to use


class SecurityCheck(ABC):
    """Base class for all per-record security checks.

    Subclass this to add a check. Each check looks at a single concern and
    returns at most one alert per record.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Check identifier (e.g., 'suspicious_pattern', 'error_threshold')."""
        pass

    @property
    @abstractmethod
    def alert_type(self) -> AlertType:
        """Type of alert this check emits."""
        pass

    @abstractmethod
    def check(self, ctx: DetectionContext) -> Alert | None:
        """Evaluate one record.

        Args:
            ctx: Detection context with the record and session state.

        Returns:
            An Alert if the check fires, None otherwise.
        """
        pass

    def make_alert(self, ctx: DetectionContext, message: str) -> Alert:
        return Alert(timestamp=ctx.now, type=self.alert_type, message=message, line_number=ctx.record.line_number)
