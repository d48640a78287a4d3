"""logmon - log ingestion, statistics and security alerting.

Typical use:

    session = create_session('apache')
    report = analyze_batch(session, '/var/log/apache2/access.log')
    print(report.to_cli())
    document = export_document(session)
"""

from logmon.__version__ import __version__
from logmon.detectors import Alert, AlertType, SuspiciousPattern, DEFAULT_SUSPICIOUS_PATTERNS
from logmon.dialects import Dialect, dialect_names
from logmon.errors import SourceUnavailableError
from logmon.models import AnalysisReport, ExportDocument
from logmon.parser import Record, Skip, parse
from logmon.report import build_report, export_document, write_export
from logmon.session import AnalysisSession, MonitorHandle, analyze_batch, cancel, create_session, start_monitor
from logmon.stats import AggregateStatistics


__all__ = [
    '__version__',
    # Dialects and parsing
    'Dialect',
    'dialect_names',
    'Record',
    'Skip',
    'parse',
    # Session operations
    'AnalysisSession',
    'MonitorHandle',
    'create_session',
    'analyze_batch',
    'start_monitor',
    'cancel',
    # Results
    'AggregateStatistics',
    'Alert',
    'AlertType',
    'AnalysisReport',
    'ExportDocument',
    'SuspiciousPattern',
    'DEFAULT_SUSPICIOUS_PATTERNS',
    'build_report',
    'export_document',
    'write_export',
    # Errors
    'SourceUnavailableError',
]
