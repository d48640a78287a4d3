"""Unit tests for security checks and the security detector."""

from datetime import UTC, datetime, timedelta

import pytest

from conftest import web_line
from logmon.detectors import (
    DEFAULT_SUSPICIOUS_PATTERNS,
    Alert,
    AlertRateWindow,
    AlertType,
    ApplicationErrorCheck,
    DetectionContext,
    ErrorThresholdCheck,
    SecurityCheck,
    SuspiciousPattern,
    SuspiciousPatternCheck,
    default_checks,
)
from logmon.dialects import Dialect
from logmon.parser import parse
from logmon.security import SecurityDetector
from logmon.stats import AggregateStatistics


NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


def make_context(line: str, dialect: Dialect = Dialect.APACHE, statistics=None, blacklist=None, line_number=1):
    """Helper to create a DetectionContext for testing."""
    record = parse(dialect, line, line_number)
    stats = statistics if statistics is not None else AggregateStatistics()
    stats.update(record)
    return DetectionContext(
        record=record,
        statistics=stats,
        blacklist=blacklist if blacklist is not None else set(),
        now=NOW,
    )


class TestSuspiciousPatternCheck:
    """Tests for SuspiciousPatternCheck."""

    def setup_method(self):
        self.check = SuspiciousPatternCheck()

    def test_name_and_type(self):
        assert self.check.name == 'suspicious_pattern'
        assert self.check.alert_type is AlertType.SUSPICIOUS_REQUEST

    def test_default_rule_order(self):
        names = [rule.name for rule in DEFAULT_SUSPICIOUS_PATTERNS]
        assert names == ['sql_injection', 'path_traversal', 'script_tag', 'script_query']

    @pytest.mark.parametrize(
        'path, rule',
        [
            ('/admin/../../../etc/passwd', 'path_traversal'),
            ('/files?name=..%2F..%2Fetc%2Fshadow', 'path_traversal'),
            ('/search?q=1+UNION+SELECT+password+FROM+users', 'sql_injection'),
            ("/login?user=admin'%20OR%20'1'='1", 'sql_injection'),
            ('/search?q=<script>alert(1)</script>', 'script_tag'),
            ('/search?q=%3Cscript%3Ealert(1)%3C/script%3E', 'script_tag'),
            ('/index.php?id=5', 'script_query'),
        ],
    )
    def test_detects_attack_paths(self, path, rule):
        ctx = make_context(web_line(ip='203.0.113.1', path=path, status=404))
        alert = self.check.check(ctx)
        assert alert is not None
        assert alert.type is AlertType.SUSPICIOUS_REQUEST
        assert '203.0.113.1' in alert.message
        assert path in alert.message
        assert f'({rule})' in alert.message
        assert alert.timestamp == NOW
        assert ctx.statistics.suspicious_request_count == 1

    @pytest.mark.parametrize('path', ['/index.html', '/products?page=2', '/api/v1/users/42', '/static/app.js'])
    def test_normal_paths_not_detected(self, path):
        ctx = make_context(web_line(path=path))
        assert self.check.check(ctx) is None
        assert ctx.statistics.suspicious_request_count == 0

    def test_first_match_wins(self):
        # Matches both script_tag and script_query; only one alert with the earlier rule
        ctx = make_context(web_line(path='/page.php?x=<script>'))
        alert = self.check.check(ctx)
        assert '(script_tag)' in alert.message
        assert ctx.statistics.suspicious_request_count == 1

    def test_checks_application_messages(self):
        ctx = make_context('2023-12-25 10:00:01 [WARN] rejected ../../etc/passwd', Dialect.GENERIC)
        alert = self.check.check(ctx)
        assert alert is not None
        assert 'unknown source' in alert.message

    def test_custom_patterns(self):
        check = SuspiciousPatternCheck([SuspiciousPattern.compile('wp', r'wp-login')])
        assert check.check(make_context(web_line(path='/wp-login.php'))) is not None
        assert check.check(make_context(web_line(path='/admin/../etc/passwd'))) is None

    def test_alert_carries_line_number(self):
        ctx = make_context(web_line(path='/a/../b'), line_number=42)
        assert self.check.check(ctx).line_number == 42


class TestErrorThresholdCheck:
    """Tests for ErrorThresholdCheck."""

    def setup_method(self):
        self.check = ErrorThresholdCheck(threshold=3)
        self.stats = AggregateStatistics()
        self.blacklist: set[str] = set()

    def run_line(self, **kwargs):
        ctx = make_context(web_line(**kwargs), statistics=self.stats, blacklist=self.blacklist)
        return self.check.check(ctx)

    def test_name_and_type(self):
        assert self.check.name == 'error_threshold'
        assert self.check.alert_type is AlertType.IP_BLACKLISTED

    def test_rejects_non_positive_threshold(self):
        with pytest.raises(ValueError):
            ErrorThresholdCheck(threshold=0)

    def test_success_responses_not_counted(self):
        assert self.run_line(ip='10.0.0.1', status=200) is None
        assert self.run_line(ip='10.0.0.1', status=302) is None
        assert self.stats.error_count_by_address == {}

    def test_fires_once_at_threshold(self):
        results = [self.run_line(ip='10.0.0.1', status=500) for _ in range(5)]
        assert results[0] is None
        assert results[1] is None
        assert results[2] is not None
        assert results[2].message == 'IP 10.0.0.1 blacklisted for 3 errors'
        assert results[3] is None
        assert results[4] is None
        assert self.stats.error_count_by_address['10.0.0.1'] == 5
        assert self.blacklist == {'10.0.0.1'}

    def test_addresses_counted_independently(self):
        for _ in range(2):
            self.run_line(ip='10.0.0.1', status=404)
            self.run_line(ip='10.0.0.2', status=403)
        assert self.blacklist == set()
        assert self.run_line(ip='10.0.0.2', status=401) is not None
        assert self.blacklist == {'10.0.0.2'}

    def test_error_counts_never_decrease(self):
        seen = []
        for status in [500, 200, 404, 200, 503, 301, 400]:
            self.run_line(ip='10.0.0.7', status=status)
            seen.append(self.stats.error_count_by_address['10.0.0.7'])
        assert seen == sorted(seen)


class TestApplicationErrorCheck:
    def setup_method(self):
        self.check = ApplicationErrorCheck()

    @pytest.mark.parametrize('severity', ['ERROR', 'FATAL', 'CRITICAL'])
    def test_error_severities(self, severity):
        ctx = make_context(f'2023-12-25 10:00:01 [{severity}] disk failure', Dialect.GENERIC)
        alert = self.check.check(ctx)
        assert alert.type is AlertType.APPLICATION_ERROR
        assert alert.message == f'{severity}: disk failure'

    @pytest.mark.parametrize('severity', ['INFO', 'WARN', 'DEBUG'])
    def test_lower_severities_ignored(self, severity):
        ctx = make_context(f'2023-12-25 10:00:01 [{severity}] all good', Dialect.GENERIC)
        assert self.check.check(ctx) is None

    def test_web_records_ignored(self):
        assert self.check.check(make_context(web_line(status=500))) is None


class TestAlertRateWindow:
    """Tests for the sliding-window alert rate check."""

    def alert(self, at: datetime, alert_type=AlertType.SUSPICIOUS_REQUEST) -> Alert:
        return Alert(timestamp=at, type=alert_type, message='x')

    def test_below_threshold(self):
        window = AlertRateWindow(threshold=5)
        for _ in range(5):
            window.observe(self.alert(NOW))
        assert window.check(NOW) is None

    def test_above_threshold_raises_on_every_check(self):
        window = AlertRateWindow(threshold=5, window_seconds=60)
        for _ in range(6):
            window.observe(self.alert(NOW))
        first = window.check(NOW)
        assert first is not None
        assert first.type is AlertType.HIGH_ALERT_RATE
        assert '6 alerts' in first.message
        window.observe(self.alert(NOW))
        second = window.check(NOW)
        assert second is not None
        assert '7 alerts' in second.message

    def test_burst_raises_for_each_check_above_threshold(self):
        window = AlertRateWindow(threshold=5, window_seconds=60)
        raised = []
        for i in range(8):
            at = NOW + timedelta(seconds=i)
            window.observe(self.alert(at))
            meta = window.check(at)
            if meta is not None:
                raised.append(meta)
        assert [meta.message for meta in raised] == [
            'HIGH ALERT: 6 alerts in the last 60 seconds',
            'HIGH ALERT: 7 alerts in the last 60 seconds',
            'HIGH ALERT: 8 alerts in the last 60 seconds',
        ]

    def test_len_counts_unevicted_alerts(self):
        window = AlertRateWindow(threshold=5)
        assert len(window) == 0
        window.observe(self.alert(NOW))
        window.observe(self.alert(NOW, AlertType.HIGH_ALERT_RATE))
        assert len(window) == 1

    def test_old_alerts_expire(self):
        window = AlertRateWindow(threshold=2, window_seconds=60)
        for _ in range(3):
            window.observe(self.alert(NOW))
        later = NOW + timedelta(seconds=60)
        assert window.count(later) == 0
        assert window.check(later) is None

    def test_meta_alerts_not_counted(self):
        window = AlertRateWindow(threshold=1)
        window.observe(self.alert(NOW, AlertType.HIGH_ALERT_RATE))
        window.observe(self.alert(NOW, AlertType.HIGH_ALERT_RATE))
        assert window.count(NOW) == 0

    def test_raises_again_after_window(self):
        window = AlertRateWindow(threshold=1, window_seconds=10)
        window.observe(self.alert(NOW))
        window.observe(self.alert(NOW))
        assert window.check(NOW) is not None
        later = NOW + timedelta(seconds=11)
        window.observe(self.alert(later))
        window.observe(self.alert(later))
        assert window.check(later) is not None


class TestSecurityDetector:
    def test_default_checks_order(self):
        assert [check.name for check in default_checks()] == [
            'suspicious_pattern',
            'error_threshold',
            'application_error',
        ]

    def test_both_checks_can_fire_on_one_record(self):
        detector = SecurityDetector(error_threshold=1)
        stats = AggregateStatistics()
        record = parse(Dialect.APACHE, web_line(ip='203.0.113.1', path='/../etc/passwd', status=404))
        stats.update(record)
        alerts = detector.evaluate(record, stats, NOW)
        assert [alert.type for alert in alerts] == [AlertType.SUSPICIOUS_REQUEST, AlertType.IP_BLACKLISTED]
        assert detector.is_blacklisted('203.0.113.1')

    def test_failing_check_does_not_stop_others(self):
        class BrokenCheck(SecurityCheck):
            name = 'broken'
            alert_type = AlertType.SUSPICIOUS_REQUEST

            def check(self, ctx):
                raise RuntimeError('boom')

        detector = SecurityDetector(checks=[BrokenCheck(), ApplicationErrorCheck()])
        stats = AggregateStatistics()
        record = parse(Dialect.GENERIC, '2023-12-25 10:00:01 [FATAL] down')
        stats.update(record)
        alerts = detector.evaluate(record, stats, NOW)
        assert [alert.type for alert in alerts] == [AlertType.APPLICATION_ERROR]
