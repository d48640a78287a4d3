"""Sliding-window alert rate check (monitor mode only)."""

import logging
from collections import deque
from datetime import datetime, timedelta

from .base import Alert, AlertType


logger = logging.getLogger(__name__)


class AlertRateWindow:
    """Tracks recent alert times and flags bursts.

    Keeps a time-ordered deque of alert timestamps, evicting entries older
    than the window, so each check is O(1) amortized instead of re-scanning
    the full alert history. HighAlertRate alerts are not counted themselves.
    Every check made while the count is above the threshold raises one.
    """

    DEFAULT_THRESHOLD = 5
    DEFAULT_WINDOW_SECONDS = 60

    def __init__(self, threshold: int = DEFAULT_THRESHOLD, window_seconds: int = DEFAULT_WINDOW_SECONDS):
        if threshold < 1:
            raise ValueError(f'High alert threshold must be positive, got {threshold}')
        self.threshold = threshold
        self.window = timedelta(seconds=window_seconds)
        self._recent: deque[datetime] = deque()

    def __len__(self) -> int:
        return len(self._recent)

    def observe(self, alert: Alert) -> None:
        """Add an alert to the window (meta-alerts are ignored)."""
        if alert.type is AlertType.HIGH_ALERT_RATE:
            return
        self._recent.append(alert.timestamp)

    def _evict(self, now: datetime) -> None:
        cutoff = now - self.window
        while self._recent and self._recent[0] <= cutoff:
            self._recent.popleft()

    def count(self, now: datetime) -> int:
        """Number of alerts raised within the window ending at ``now``."""
        self._evict(now)
        return len(self._recent)

    def check(self, now: datetime) -> Alert | None:
        """Return a HighAlertRate alert if the recent alert count exceeds the threshold."""
        recent = self.count(now)
        if recent <= self.threshold:
            return None

        logger.debug(f'Alert rate {recent} above threshold {self.threshold}')
        return Alert(
            timestamp=now,
            type=AlertType.HIGH_ALERT_RATE,
            message=f'HIGH ALERT: {recent} alerts in the last {int(self.window.total_seconds())} seconds',
        )
