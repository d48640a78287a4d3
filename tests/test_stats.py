"""Tests for aggregate statistics."""

from datetime import UTC, datetime

from conftest import web_line
from logmon.dialects import Dialect
from logmon.parser import parse
from logmon.stats import AggregateStatistics, hour_bucket


def record(**kwargs):
    return parse(Dialect.APACHE, web_line(**kwargs))


class TestAggregateStatistics:
    def setup_method(self):
        self.stats = AggregateStatistics()

    def test_empty(self):
        assert self.stats.total_record_count == 0
        assert self.stats.first_record_time is None
        assert self.stats.duration_seconds == 0.0
        assert self.stats.records_per_hour == 0.0

    def test_update_counts_every_field(self):
        self.stats.update(record(ip='10.0.0.1', path='/a', status=200, size=100, method='GET'))
        self.stats.update(record(ip='10.0.0.1', path='/b', status=404, size='-', method='POST'))

        assert self.stats.total_record_count == 2
        assert self.stats.unique_source_addresses == {'10.0.0.1'}
        assert self.stats.status_code_histogram == {200: 1, 404: 1}
        assert self.stats.method_histogram == {'GET': 1, 'POST': 1}
        assert self.stats.path_histogram == {'/a': 1, '/b': 1}
        assert self.stats.bytes_transferred_total == 100
        assert self.stats.hourly_bucket_histogram == {'2023-12-25 10:00': 2}

    def test_update_does_not_touch_error_counts(self):
        self.stats.update(record(status=500))
        assert self.stats.error_count_by_address == {}

    def test_first_and_last_track_extremes(self):
        self.stats.update(record(timestamp='25/Dec/2023:12:00:00 +0000'))
        self.stats.update(record(timestamp='25/Dec/2023:10:00:00 +0000'))
        self.stats.update(record(timestamp='25/Dec/2023:11:00:00 +0000'))

        assert self.stats.first_record_time == datetime(2023, 12, 25, 10, 0, tzinfo=UTC)
        assert self.stats.last_record_time == datetime(2023, 12, 25, 12, 0, tzinfo=UTC)
        assert self.stats.duration_seconds == 7200
        assert self.stats.records_per_hour == 1.5

    def test_application_record_has_no_web_fields(self):
        self.stats.update(parse(Dialect.GENERIC, '2023-12-25 10:00:01 [INFO] hello'))
        assert self.stats.total_record_count == 1
        assert self.stats.unique_source_addresses == set()
        assert sum(self.stats.status_code_histogram.values()) == 0
        assert self.stats.bytes_transferred_total == 0

    def test_invariants_hold(self):
        for i in range(20):
            self.stats.update(record(ip=f'10.0.0.{i % 3}', status=200 + (i % 2) * 300))
        assert len(self.stats.unique_source_addresses) <= self.stats.total_record_count
        assert sum(self.stats.status_code_histogram.values()) <= self.stats.total_record_count
        assert self.stats.first_record_time <= self.stats.last_record_time

    def test_record_error_returns_running_total(self):
        assert self.stats.record_error('10.0.0.9') == 1
        assert self.stats.record_error('10.0.0.9') == 2


def test_hour_bucket_truncates():
    assert hour_bucket(datetime(2023, 12, 25, 10, 59, 59, tzinfo=UTC)) == '2023-12-25 10:00'
