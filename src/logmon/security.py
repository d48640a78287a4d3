"""Security detector: runs the per-record checks and owns the blacklist."""

import logging
from datetime import datetime

from logmon.detectors import (
    Alert,
    DetectionContext,
    ErrorThresholdCheck,
    SecurityCheck,
    SuspiciousPattern,
    default_checks,
)
from logmon.parser import Record
from logmon.stats import AggregateStatistics


logger = logging.getLogger(__name__)


class SecurityDetector:
    """Evaluates records against the configured checks.

    Checks run in a fixed order and independently, so several may fire on
    the same record. An unexpected failure inside one check is logged and
    does not stop the remaining checks.
    """

    def __init__(
        self,
        suspicious_patterns: list[SuspiciousPattern] | tuple[SuspiciousPattern, ...] | None = None,
        error_threshold: int = ErrorThresholdCheck.DEFAULT_THRESHOLD,
        checks: list[SecurityCheck] | None = None,
    ):
        self.error_threshold = error_threshold
        self.blacklist: set[str] = set()
        if checks is not None:
            logger.debug(f'[DETECTOR] Using {len(checks)} custom checks')
            self.checks = checks
        else:
            self.checks = default_checks(suspicious_patterns, error_threshold)
            logger.debug(f'[DETECTOR] Created {len(self.checks)} default checks: {[c.name for c in self.checks]}')

    def evaluate(self, record: Record, statistics: AggregateStatistics, now: datetime) -> list[Alert]:
        """Run every check against a record.

        Args:
            record: Record already folded into ``statistics``
            statistics: Session statistics (error counts are updated here)
            now: Timestamp for any alerts raised

        Returns:
            Alerts raised for this record, in check order.
        """
        ctx = DetectionContext(record=record, statistics=statistics, blacklist=self.blacklist, now=now)
        alerts = []
        for check in self.checks:
            try:
                alert = check.check(ctx)
            except Exception as e:
                logger.warning(f'[DETECTOR] {check.name} failed on line {record.line_number}: {e}', exc_info=True)
                continue
            if alert is not None:
                alerts.append(alert)
        return alerts

    def is_blacklisted(self, address: str) -> bool:
        return address in self.blacklist
