"""Running aggregate statistics for one analysis session."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from logmon.parser import Record


HOUR_BUCKET_FORMAT = '%Y-%m-%d %H:00'


def hour_bucket(timestamp: datetime) -> str:
    """Truncate a timestamp to its hour bucket key (e.g. '2023-12-25 10:00')."""
    return timestamp.strftime(HOUR_BUCKET_FORMAT)


@dataclass
class AggregateStatistics:
    """Mutable running summary, updated once per parsed record.

    Counters only ever grow within a session; nothing is removed or decayed.
    ``error_count_by_address`` and ``suspicious_request_count`` are maintained
    by the security detector, everything else by ``update``.
    """

    total_record_count: int = 0
    unique_source_addresses: set[str] = field(default_factory=set)
    status_code_histogram: Counter = field(default_factory=Counter)
    method_histogram: Counter = field(default_factory=Counter)
    path_histogram: Counter = field(default_factory=Counter)
    hourly_bucket_histogram: Counter = field(default_factory=Counter)
    bytes_transferred_total: int = 0
    error_count_by_address: Counter = field(default_factory=Counter)
    suspicious_request_count: int = 0
    skipped_line_count: int = 0
    first_record_time: datetime | None = None
    last_record_time: datetime | None = None

    def update(self, record: Record) -> None:
        """Fold one record into the running summary."""
        self.total_record_count += 1
        if record.source_address is not None:
            self.unique_source_addresses.add(record.source_address)
        if record.status_code is not None:
            self.status_code_histogram[record.status_code] += 1
        if record.http_method is not None:
            self.method_histogram[record.http_method] += 1
        if record.path is not None:
            self.path_histogram[record.path] += 1
        self.bytes_transferred_total += record.bytes_transferred
        self.hourly_bucket_histogram[hour_bucket(record.timestamp)] += 1

        if self.first_record_time is None or record.timestamp < self.first_record_time:
            self.first_record_time = record.timestamp
        if self.last_record_time is None or record.timestamp > self.last_record_time:
            self.last_record_time = record.timestamp

    def record_error(self, address: str) -> int:
        """Count one error response for ``address`` and return its new total."""
        self.error_count_by_address[address] += 1
        return self.error_count_by_address[address]

    @property
    def duration_seconds(self) -> float:
        """Seconds between the first and last record, 0 when unknown."""
        if self.first_record_time is None or self.last_record_time is None:
            return 0.0
        return (self.last_record_time - self.first_record_time).total_seconds()

    @property
    def records_per_hour(self) -> float:
        """Average throughput over the observed time span."""
        hours = self.duration_seconds / 3600
        if hours <= 0:
            return 0.0
        return self.total_record_count / hours
