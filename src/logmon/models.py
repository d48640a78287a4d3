"""Pydantic models for reports and exports"""

from pydantic import BaseModel, Field


class StatisticsDocument(BaseModel):
    """Every field of the session's aggregate statistics, in export form."""

    total_record_count: int = Field(..., examples=[1024], description="Lines parsed into records")
    unique_source_address_count: int = Field(..., examples=[37])
    status_code_histogram: dict[str, int] = Field(default_factory=dict, examples=[{"200": 900, "404": 124}])
    method_histogram: dict[str, int] = Field(default_factory=dict, examples=[{"GET": 1000, "POST": 24}])
    path_histogram: dict[str, int] = Field(default_factory=dict, examples=[{"/index.html": 512}])
    hourly_bucket_histogram: dict[str, int] = Field(default_factory=dict, examples=[{"2023-12-25 10:00": 1024}])
    bytes_transferred_total: int = Field(0, examples=[1048576])
    error_count_by_address: dict[str, int] = Field(default_factory=dict, examples=[{"10.0.0.1": 12}])
    suspicious_request_count: int = Field(0, description="Records that matched a suspicious pattern")
    skipped_line_count: int = Field(0, description="Non-blank lines that did not produce a record")
    first_record_time: str | None = Field(None, examples=["2023-12-25T10:00:01+00:00"])
    last_record_time: str | None = Field(None, examples=["2023-12-25T10:59:59+00:00"])


class AlertDocument(BaseModel):
    """A single alert in export form"""

    timestamp: str = Field(..., examples=["2023-12-25T10:00:03+00:00"])
    type: str = Field(..., examples=["SuspiciousRequest"])
    message: str = Field(..., examples=["Potential attack from 203.0.113.1: /admin/../etc/passwd (path_traversal)"])
    line_number: int | None = Field(None, examples=[3], description="1-based line number (batch mode only)")


class ExportDocument(BaseModel):
    """Machine-readable export of a whole analysis session

    Attributes:
        analysis_timestamp: When the export was produced (ISO-8601)
        dialect: Dialect the session parsed with
        statistics: Aggregate statistics
        alerts: Every alert, in the order raised
        blacklisted_addresses: Addresses that crossed the error threshold
    """

    analysis_timestamp: str = Field(..., examples=["2023-12-25T11:00:00+00:00"])
    dialect: str = Field(..., examples=["apache"])
    statistics: StatisticsDocument
    alerts: list[AlertDocument] = Field(default_factory=list)
    blacklisted_addresses: list[str] = Field(default_factory=list)


class StatusShare(BaseModel):
    """One row of the status code distribution"""

    status_code: str
    count: int
    percentage: float
    category: str = Field(..., examples=["success"], description="success, redirect, client_error, server_error or unknown")


class ErrorSource(BaseModel):
    """An address ranked by the error responses it received"""

    address: str
    errors: int
    blacklisted: bool = False


class AnalysisReport(BaseModel):
    """Human-readable summary of an analysis session

    Built from session state by ``logmon.report.build_report`` and rendered
    for the terminal with ``to_cli``.
    """

    dialect: str
    source: str | None = None
    total_record_count: int = 0
    unique_source_address_count: int = 0
    skipped_line_count: int = 0
    first_record_time: str | None = None
    last_record_time: str | None = None
    duration_hours: float = 0.0
    records_per_hour: float = 0.0
    analysis_seconds: float = Field(0.0, description="Wall-clock time spent processing lines")
    bytes_transferred_total: int = 0
    bytes_transferred_human: str = '0.00 B'
    top_paths: list[tuple[str, int]] = Field(default_factory=list)
    recent_hourly_buckets: list[tuple[str, int]] = Field(default_factory=list)
    status_distribution: list[StatusShare] = Field(default_factory=list)
    top_error_sources: list[ErrorSource] = Field(default_factory=list)
    suspicious_request_count: int = 0
    blacklisted_count: int = 0
    alerts_by_type: dict[str, int] = Field(default_factory=dict)
    total_alerts: int = 0

    def to_cli(self, colorize: bool = False) -> str:
        """Format report for CLI output"""
        # ANSI color codes
        GREY = '\033[90m'
        BOLD_CYAN = '\033[1;36m'
        YELLOW = '\033[33m'
        GREEN = '\033[32m'
        RED = '\033[31m'
        BOLD_RED = '\033[1;31m'
        RESET = '\033[0m'

        def paint(text: str, color: str) -> str:
            return f'{color}{text}{RESET}' if colorize else text

        status_colors = {
            'success': GREEN,
            'redirect': GREY,
            'client_error': YELLOW,
            'server_error': RED,
            'unknown': GREY,
        }

        lines = [paint('LOG ANALYSIS REPORT', BOLD_CYAN), '=' * 50]
        if self.source:
            lines.append(f'Source: {self.source} ({self.dialect})')
        else:
            lines.append(f'Dialect: {self.dialect}')

        lines.append('')
        lines.append(paint('Summary:', BOLD_CYAN))
        lines.append(f'  Total Records: {self.total_record_count}')
        lines.append(f'  Unique IPs: {self.unique_source_address_count}')
        if self.skipped_line_count:
            lines.append(f'  Skipped Lines: {paint(str(self.skipped_line_count), YELLOW)}')
        if self.first_record_time:
            lines.append(f'  Time Period: {self.first_record_time} to {self.last_record_time}')
        lines.append(f'  Duration: {self.duration_hours:.2f} hours')
        lines.append(f'  Avg Records/Hour: {self.records_per_hour:.2f}')
        lines.append(f'  Data Transferred: {self.bytes_transferred_human}')
        lines.append(f'  Analysis Time: {self.analysis_seconds:.3f}s')

        if self.top_paths:
            lines.append('')
            lines.append(paint('Top Requested Paths:', BOLD_CYAN))
            for path, count in self.top_paths:
                lines.append(f'  {path}: {count} requests')

        if self.recent_hourly_buckets:
            lines.append('')
            lines.append(paint('Hourly Traffic:', BOLD_CYAN))
            for hour, count in self.recent_hourly_buckets:
                lines.append(f'  {hour}: {count} records')

        lines.append('')
        lines.append(paint('SECURITY ANALYSIS', BOLD_CYAN))
        lines.append('=' * 50)

        if self.top_error_sources:
            lines.append(paint('Top Error-generating IPs:', BOLD_RED))
            for source in self.top_error_sources:
                marker = f' {paint("[BLACKLISTED]", BOLD_RED)}' if source.blacklisted else ''
                lines.append(f'  {source.address}: {source.errors} errors{marker}')

        if self.suspicious_request_count:
            lines.append(f'Suspicious Requests Detected: {paint(str(self.suspicious_request_count), RED)}')

        if self.status_distribution:
            lines.append('Response Code Distribution:')
            for share in self.status_distribution:
                code = paint(share.status_code, status_colors.get(share.category, GREY))
                lines.append(f'  {code}: {share.count} ({share.percentage:.2f}%)')

        lines.append('')
        alert_color = RED if self.total_alerts else GREEN
        lines.append(f'Total Alerts: {paint(str(self.total_alerts), alert_color)}')
        for alert_type, count in sorted(self.alerts_by_type.items()):
            lines.append(f'  {alert_type}: {count}')

        return '\n'.join(lines)
