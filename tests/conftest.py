"""Pytest configuration and shared fixtures."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from gc_summary.core.errors import NotFound
from gc_summary.core.logging import setup_logging
from gc_summary.core.models import RecordSummary, Snapshot, Tier, TierResult
from gc_summary.io.snapshot_store import InMemorySnapshotStore
from gc_summary.source.record_source import RecordSource

TOKYO = ZoneInfo("Asia/Tokyo")


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Set up logging for all tests."""
    setup_logging(level="ERROR")  # Reduce noise during tests


def make_snapshot(record_id, title="Song", has_extra=False, **tiers):
    """Build a snapshot; tier keyword arguments take TierResult keyword dicts."""
    return Snapshot(
        id=record_id,
        title=title,
        has_extra_tier=has_extra,
        tiers={Tier(name): TierResult(**values) for name, values in tiers.items()},
    )


class FakeRecordSource(RecordSource):
    """In-memory record source; raises any exception queued for an id."""

    def __init__(self, summaries=None, details=None, errors=None, list_error=None):
        super().__init__()
        self.summaries = summaries or []
        self.details = details or {}
        self.errors = errors or {}
        self.list_error = list_error
        self.fetched = []
        self.closed = False

    def list_summaries(self):
        if self.list_error:
            raise self.list_error
        return list(self.summaries)

    def fetch_detail(self, record_id):
        self.fetched.append(record_id)
        if record_id in self.errors:
            raise self.errors[record_id]
        if record_id not in self.details:
            raise NotFound(record_id)
        return self.details[record_id]

    def close(self):
        self.closed = True


@pytest.fixture
def fixed_now():
    return datetime(2017, 1, 3, 12, 0, 0, tzinfo=TOKYO)


@pytest.fixture
def memory_store():
    return InMemorySnapshotStore(watermark="2017-01-01 10:21:30")


@pytest.fixture
def summaries():
    return [
        RecordSummary(id=1, title="Got a pain cover?", last_activity_time="2017-01-02 00:00:00"),
        RecordSummary(id=2, title="Axeria", last_activity_time="2017-01-01 10:21:30"),
        RecordSummary(id=3, title="Black MInD", last_activity_time="2017-01-01 09:00:00"),
    ]


@pytest.fixture
def snapshot_factory():
    return make_snapshot


@pytest.fixture
def source_factory():
    return FakeRecordSource
