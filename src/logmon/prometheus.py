"""Prometheus metrics for logmon"""

from prometheus_client import Counter, Histogram

# ============================================================================
# Line Metrics
# ============================================================================

# Lines parsed into records
lines_processed_total = Counter('logmon_lines_processed_total', 'Total number of lines parsed into records', ['dialect'])

# Lines that did not match the active dialect
lines_skipped_total = Counter(
    'logmon_lines_skipped_total',
    'Total number of lines skipped',
    ['dialect', 'reason'],  # no_match, error
)


# ============================================================================
# Alert Metrics
# ============================================================================

alerts_total = Counter(
    'logmon_alerts_total',
    'Total number of alerts raised',
    ['type'],  # SuspiciousRequest, IpBlacklisted, ApplicationError, HighAlertRate
)

blacklisted_addresses_total = Counter('logmon_blacklisted_addresses_total', 'Total number of addresses blacklisted')


# ============================================================================
# Performance Metrics
# ============================================================================

batch_duration_seconds = Histogram(
    'logmon_batch_duration_seconds',
    'Time spent analyzing a finite log source',
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
    # 10ms to 5 minutes - small samples up to multi-GB access logs
)
