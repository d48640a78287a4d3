"""Security checks.

This package contains the per-record security checks and the streaming
alert-rate window.
"""

from .alert_rate import AlertRateWindow
from .application_error import ApplicationErrorCheck
from .base import Alert, AlertType, DetectionContext, SecurityCheck, SuspiciousPattern
from .error_threshold import ErrorThresholdCheck
from .suspicious_pattern import DEFAULT_SUSPICIOUS_PATTERNS, SuspiciousPatternCheck


__all__ = [
    # Base classes and data models
    'Alert',
    'AlertType',
    'DetectionContext',
    'SecurityCheck',
    'SuspiciousPattern',
    # Checks
    'ApplicationErrorCheck',
    'ErrorThresholdCheck',
    'SuspiciousPatternCheck',
    'AlertRateWindow',
    'DEFAULT_SUSPICIOUS_PATTERNS',
    # Factory
    'default_checks',
]


def default_checks(
    suspicious_patterns: list[SuspiciousPattern] | tuple[SuspiciousPattern, ...] | None = None,
    error_threshold: int = ErrorThresholdCheck.DEFAULT_THRESHOLD,
) -> list[SecurityCheck]:
    """Get the default checks, in evaluation order.

    Returns:
        List of instantiated check objects.
    """
    return [
        SuspiciousPatternCheck(suspicious_patterns),
        ErrorThresholdCheck(error_threshold),
        ApplicationErrorCheck(),
    ]
