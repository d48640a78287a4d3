"""Report rendering and structured export for analysis sessions."""

import logging
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from logmon.models import AlertDocument, AnalysisReport, ErrorSource, ExportDocument, StatisticsDocument, StatusShare
from logmon.utils import human_readable_size


if TYPE_CHECKING:
    from logmon.session import AnalysisSession


logger = logging.getLogger(__name__)

TOP_N = 10
HOURLY_WINDOW = 24


def status_category(status_code: int | str) -> str:
    """Classify a status code into a response category."""
    try:
        code = int(status_code)
    except (TypeError, ValueError):
        return 'unknown'
    if 200 <= code < 300:
        return 'success'
    if 300 <= code < 400:
        return 'redirect'
    if 400 <= code < 500:
        return 'client_error'
    if 500 <= code < 600:
        return 'server_error'
    return 'unknown'


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _string_keys(counter: Counter) -> dict[str, int]:
    return {str(key): count for key, count in counter.items()}


def build_report(session: 'AnalysisSession', top_n: int = TOP_N, hourly_window: int = HOURLY_WINDOW) -> AnalysisReport:
    """Render the session's current state into a human-readable summary.

    Args:
        session: Session to summarize
        top_n: Number of paths and error sources to list
        hourly_window: Number of most recent hourly buckets to list

    Returns:
        AnalysisReport ready for ``to_cli`` or JSON output.
    """
    stats = session.statistics
    total = stats.total_record_count

    status_distribution = []
    for code, count in sorted(stats.status_code_histogram.items(), key=lambda item: str(item[0])):
        percentage = round(count / total * 100, 2) if total else 0.0
        status_distribution.append(
            StatusShare(status_code=str(code), count=count, percentage=percentage, category=status_category(code))
        )

    top_error_sources = [
        ErrorSource(address=address, errors=errors, blacklisted=session.detector.is_blacklisted(address))
        for address, errors in stats.error_count_by_address.most_common(top_n)
    ]

    recent_hours = sorted(stats.hourly_bucket_histogram.items())[-hourly_window:] if hourly_window > 0 else []

    return AnalysisReport(
        dialect=session.dialect.label,
        source=session.source,
        total_record_count=total,
        unique_source_address_count=len(stats.unique_source_addresses),
        skipped_line_count=stats.skipped_line_count,
        first_record_time=_isoformat(stats.first_record_time),
        last_record_time=_isoformat(stats.last_record_time),
        duration_hours=round(stats.duration_seconds / 3600, 2),
        records_per_hour=round(stats.records_per_hour, 2),
        analysis_seconds=session.analysis_seconds,
        bytes_transferred_total=stats.bytes_transferred_total,
        bytes_transferred_human=human_readable_size(stats.bytes_transferred_total),
        top_paths=stats.path_histogram.most_common(top_n),
        recent_hourly_buckets=recent_hours,
        status_distribution=status_distribution,
        top_error_sources=top_error_sources,
        suspicious_request_count=stats.suspicious_request_count,
        blacklisted_count=len(session.blacklist),
        alerts_by_type=dict(Counter(alert.type.value for alert in session.alerts)),
        total_alerts=len(session.alerts),
    )


def export_document(session: 'AnalysisSession', analysis_timestamp: datetime | None = None) -> ExportDocument:
    """Serialize the session's statistics, alerts and blacklist.

    Args:
        session: Session to export
        analysis_timestamp: Export time, defaults to now (UTC)

    Returns:
        ExportDocument mirroring the in-memory state.
    """
    stats = session.statistics
    statistics = StatisticsDocument(
        total_record_count=stats.total_record_count,
        unique_source_address_count=len(stats.unique_source_addresses),
        status_code_histogram=_string_keys(stats.status_code_histogram),
        method_histogram=_string_keys(stats.method_histogram),
        path_histogram=_string_keys(stats.path_histogram),
        hourly_bucket_histogram=_string_keys(stats.hourly_bucket_histogram),
        bytes_transferred_total=stats.bytes_transferred_total,
        error_count_by_address=_string_keys(stats.error_count_by_address),
        suspicious_request_count=stats.suspicious_request_count,
        skipped_line_count=stats.skipped_line_count,
        first_record_time=_isoformat(stats.first_record_time),
        last_record_time=_isoformat(stats.last_record_time),
    )
    alerts = [
        AlertDocument(
            timestamp=alert.timestamp.isoformat(),
            type=alert.type.value,
            message=alert.message,
            line_number=alert.line_number,
        )
        for alert in session.alerts
    ]
    return ExportDocument(
        analysis_timestamp=(analysis_timestamp or datetime.now(UTC)).isoformat(),
        dialect=session.dialect.label,
        statistics=statistics,
        alerts=alerts,
        blacklisted_addresses=sorted(session.blacklist),
    )


def default_export_path() -> Path:
    return Path(f'log_analysis_{datetime.now().strftime("%Y%m%d_%H%M%S")}.json')


def write_export(session: 'AnalysisSession', path: str | Path | None = None) -> Path:
    """Write the session's export document as JSON and return the file path."""
    target = Path(path) if path is not None else default_export_path()
    document = export_document(session)
    target.write_text(document.model_dump_json(indent=2) + '\n', encoding='utf-8')
    logger.info(f'Analysis exported to {target}')
    return target
