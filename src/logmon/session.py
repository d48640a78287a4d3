"""Analysis sessions: batch and streaming consumption of a line source.

A session owns one dialect selection, one statistics object, one alert list
and one blacklist. Every line goes through the same pipeline:

    parse -> statistics update -> security checks -> append alerts

Streaming mode adds the sliding-window alert rate check after each record.
"""

import logging
import os
import signal
import threading
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from time import time

from logmon import prometheus as prom
from logmon.detectors import Alert, AlertRateWindow, AlertType, SuspiciousPattern
from logmon.dialects import Dialect
from logmon.errors import SourceUnavailableError
from logmon.models import AnalysisReport
from logmon.parser import Record, Skip, parse
from logmon.report import build_report
from logmon.security import SecurityDetector
from logmon.stats import AggregateStatistics
from logmon.utils import (
    default_alert_window_seconds,
    default_error_threshold,
    default_high_alert_threshold,
    default_poll_interval_ms,
)


logger = logging.getLogger(__name__)

LineSource = str | os.PathLike | Iterable[str]


def utc_now() -> datetime:
    return datetime.now(UTC)


class AnalysisSession:
    """Sole owner of the mutable state of one analysis run.

    Sessions are never shared: create a new one per batch or monitor run.
    """

    def __init__(
        self,
        dialect: Dialect,
        detector: SecurityDetector,
        alert_window: AlertRateWindow,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.dialect = dialect
        self.detector = detector
        self.alert_window = alert_window
        self.clock = clock
        self.statistics = AggregateStatistics()
        self.alerts: list[Alert] = []
        self.source: str | None = None
        self.analysis_seconds = 0.0

    @property
    def blacklist(self) -> set[str]:
        return self.detector.blacklist

    @property
    def error_threshold(self) -> int:
        return self.detector.error_threshold

    @property
    def high_alert_threshold(self) -> int:
        return self.alert_window.threshold

    def process_line(self, raw_line: str, line_number: int | None = None, streaming: bool = False) -> Record | Skip:
        """Run one raw line through the pipeline.

        Never raises: a line that fails to match, or any unexpected error
        while handling it, is logged and reported as a Skip.

        Args:
            raw_line: Line content
            line_number: 1-based line number (batch mode)
            streaming: Also run the sliding-window alert rate check

        Returns:
            The parsed Record, or the Skip describing why the line was dropped.
        """
        try:
            outcome = parse(self.dialect, raw_line, line_number)
            if isinstance(outcome, Skip):
                self._skip(outcome)
                return outcome

            self.statistics.update(outcome)
            for alert in self.detector.evaluate(outcome, self.statistics, self.clock()):
                self._append_alert(alert, streaming)

            if streaming:
                meta_alert = self.alert_window.check(self.clock())
                if meta_alert is not None:
                    self._append_alert(meta_alert, streaming)

            prom.lines_processed_total.labels(dialect=self.dialect.label).inc()
            return outcome
        except Exception as e:
            logger.warning(f'Error processing line {line_number}: {e}', exc_info=True)
            skip = Skip(reason=f'unexpected error: {e}', raw_line=raw_line, line_number=line_number)
            self.statistics.skipped_line_count += 1
            prom.lines_skipped_total.labels(dialect=self.dialect.label, reason='error').inc()
            return skip

    def _skip(self, skip: Skip) -> None:
        if skip.blank:
            return
        self.statistics.skipped_line_count += 1
        prom.lines_skipped_total.labels(dialect=self.dialect.label, reason='no_match').inc()
        where = f'line {skip.line_number}' if skip.line_number is not None else 'line'
        logger.warning(f'Skipping {where}: {skip.reason}')

    def _append_alert(self, alert: Alert, streaming: bool = False) -> None:
        self.alerts.append(alert)
        if streaming:
            # Only streaming checks (and prunes) the rate window
            self.alert_window.observe(alert)
        prom.alerts_total.labels(type=alert.type.value).inc()
        if alert.type is AlertType.IP_BLACKLISTED:
            prom.blacklisted_addresses_total.inc()

        suffix = f' (line {alert.line_number})' if alert.line_number is not None else ''
        logger.warning(f'ALERT [{alert.type.value}]: {alert.message}{suffix}')


def create_session(
    dialect: Dialect | str,
    suspicious_patterns: list[SuspiciousPattern] | tuple[SuspiciousPattern, ...] | None = None,
    error_threshold: int | None = None,
    high_alert_threshold: int | None = None,
    alert_window_seconds: int | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> AnalysisSession:
    """Create a fresh analysis session.

    Thresholds left as None come from the environment
    (LOGMON_ERROR_THRESHOLD, LOGMON_HIGH_ALERT_THRESHOLD,
    LOGMON_ALERT_WINDOW_SECONDS) or fall back to 10, 5 and 60.

    Args:
        dialect: Dialect or dialect name ('apache', 'nginx', 'application', 'generic')
        suspicious_patterns: Ordered suspicious pattern rules, defaults to the built-in set
        error_threshold: Error responses per address before it is blacklisted
        high_alert_threshold: Alerts per window above which HighAlertRate fires
        alert_window_seconds: Length of the alert rate window
        clock: Source of alert timestamps

    Raises:
        ValueError: Unknown dialect or non-positive threshold.
    """
    selected = Dialect.from_name(dialect)
    if error_threshold is None:
        error_threshold = default_error_threshold()
    if high_alert_threshold is None:
        high_alert_threshold = default_high_alert_threshold()
    if alert_window_seconds is None:
        alert_window_seconds = default_alert_window_seconds()

    detector = SecurityDetector(suspicious_patterns=suspicious_patterns, error_threshold=error_threshold)
    alert_window = AlertRateWindow(threshold=high_alert_threshold, window_seconds=alert_window_seconds)
    logger.debug(
        f'Created {selected.label} session: error_threshold={error_threshold}, '
        f'high_alert_threshold={high_alert_threshold}, window={alert_window_seconds}s'
    )
    return AnalysisSession(selected, detector, alert_window, clock=clock)


def _open_source(path: str | os.PathLike, mode: str = 'r'):
    try:
        if mode == 'rb':
            return open(path, 'rb')
        return open(path, 'r', encoding='utf-8', errors='replace')
    except OSError as e:
        raise SourceUnavailableError(os.fspath(path), e.strerror or str(e)) from e


def analyze_batch(session: AnalysisSession, source: LineSource) -> AnalysisReport:
    """Consume a finite line source from start to end.

    Args:
        session: Session to update
        source: File path, or any iterable of lines

    Returns:
        Report of the session state after the last line.

    Raises:
        SourceUnavailableError: If a path source cannot be opened.
    """
    start = time()
    if isinstance(source, (str, os.PathLike)):
        with _open_source(source) as f:
            session.source = os.fspath(source)
            logger.info(f'Analyzing log file: {session.source}')
            processed = _consume(session, f)
    else:
        processed = _consume(session, source)

    elapsed = time() - start
    session.analysis_seconds += elapsed
    prom.batch_duration_seconds.observe(elapsed)
    logger.info(f'Analysis complete: {processed} lines in {elapsed:.2f} seconds')
    return build_report(session)


def _consume(session: AnalysisSession, lines: Iterable[str]) -> int:
    count = 0
    for line_number, line in enumerate(lines, 1):
        session.process_line(line, line_number)
        count = line_number
    return count


class MonitorHandle:
    """Cancellable handle for following a growing log file.

    The file is only held open while the handle is entered (``with handle:``)
    or while ``run`` is executing; it is closed on every exit path.

    Example:
        handle = start_monitor(session, '/var/log/nginx/access.log')
        report = handle.run()  # until cancel(handle) or Ctrl+C
    """

    def __init__(self, session: AnalysisSession, path: str, offset: int, poll_interval_ms: int):
        self.session = session
        self.path = path
        self.poll_interval = poll_interval_ms / 1000
        self.report: AnalysisReport | None = None
        self._offset = offset
        self._cancelled = threading.Event()
        self._file = None
        self._pending = b''
        self._truncation_warned = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Request a graceful stop. Safe to call from a signal handler or another thread."""
        self._cancelled.set()

    def __enter__(self) -> 'MonitorHandle':
        f = _open_source(self.path, 'rb')
        f.seek(self._offset)
        self._file = f
        logger.info(f'Monitoring {self.path} from offset {self._offset}')
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            self._finalize()
        finally:
            if self._file is not None:
                self._offset = self._file.tell()
                self._file.close()
                self._file = None

    def poll(self) -> int:
        """Process every complete line appended since the last poll.

        Returns:
            Number of lines consumed.
        """
        if self._file is None:
            raise RuntimeError('Monitor source is not open; use the handle as a context manager or call run()')

        self._check_truncation()
        consumed = 0
        while not self._cancelled.is_set():
            chunk = self._file.readline()
            if not chunk:
                break
            if not chunk.endswith(b'\n'):
                # Writer is mid-line; keep the fragment until the rest arrives
                self._pending += chunk
                break
            line = (self._pending + chunk).decode('utf-8', errors='replace')
            self._pending = b''
            self.session.process_line(line, streaming=True)
            consumed += 1
        return consumed

    def run(self) -> AnalysisReport:
        """Poll until cancelled or interrupted, then return the final report.

        When called from the main thread, SIGINT (Ctrl+C) is turned into
        ``cancel()`` for the duration of the run, so a line that is being
        processed is always finished before the final report is built.
        """
        start = time()
        restore_handler = self._install_interrupt_handler()
        try:
            with self:
                try:
                    while not self._cancelled.is_set():
                        if self.poll() == 0:
                            self._cancelled.wait(self.poll_interval)
                except KeyboardInterrupt:
                    logger.info('Monitoring interrupted')
        finally:
            restore_handler()
            self.session.analysis_seconds += time() - start
        logger.info('Monitoring stopped')
        return self.report

    def _install_interrupt_handler(self) -> Callable[[], None]:
        """Route SIGINT to ``cancel`` and return a callable restoring the old handler."""
        if threading.current_thread() is not threading.main_thread():
            return lambda: None

        def on_interrupt(signum, frame):
            logger.info('Monitoring interrupted')
            self.cancel()

        previous = signal.signal(signal.SIGINT, on_interrupt)
        if previous is None:
            # Installed outside Python; the closest restorable handler is the default
            previous = signal.default_int_handler

        return lambda: signal.signal(signal.SIGINT, previous)

    def _check_truncation(self) -> None:
        if self._truncation_warned:
            return
        size = os.fstat(self._file.fileno()).st_size
        position = self._file.tell()
        if size < position:
            # Rotation/truncation is not followed; we keep reading from the old offset
            logger.warning(f'{self.path} shrank below read offset ({size} < {position}); file was truncated or rotated')
            self._truncation_warned = True

    def _finalize(self) -> None:
        if self._pending:
            line = self._pending.decode('utf-8', errors='replace')
            self._pending = b''
            self.session.process_line(line, streaming=True)
        self.report = build_report(self.session)


def start_monitor(
    session: AnalysisSession, source: str | os.PathLike, poll_interval_ms: int | None = None
) -> MonitorHandle:
    """Prepare to follow a growing file from its current end.

    Args:
        session: Session to update
        source: Path of the file to follow
        poll_interval_ms: Wait between polls when no new line is available
                          (LOGMON_POLL_INTERVAL_MS, default 1000)

    Raises:
        SourceUnavailableError: If the file cannot be opened.
    """
    path = os.fspath(source)
    if poll_interval_ms is None:
        poll_interval_ms = default_poll_interval_ms()
    if poll_interval_ms < 0:
        raise ValueError(f'Poll interval must not be negative, got {poll_interval_ms}')

    with _open_source(path, 'rb') as f:
        offset = f.seek(0, os.SEEK_END)

    session.source = path
    return MonitorHandle(session, path, offset, poll_interval_ms)


def cancel(handle: MonitorHandle) -> None:
    """Request a graceful stop of a running monitor."""
    handle.cancel()

