"""Shared pytest fixtures for logscope tests."""

import itertools
from collections import deque
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from logscope.core.clock import ManualClock
from logscope.models.entry import LogEntry
from logscope.plugin import ProducerPlugin, hookimpl

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class ListProducer(ProducerPlugin):
    """Producer that hands out queued records, one per tick."""

    name = "list"

    def __init__(self, entries=(), events=()):
        self.entries = deque(entries)
        self.events = deque(events)
        self.log_polls = 0
        self.event_polls = 0

    def push(self, *entries):
        self.entries.extend(entries)

    def push_event(self, *events):
        self.events.extend(events)

    @hookimpl
    def next_log_entry(self, now):
        self.log_polls += 1
        return self.entries.popleft() if self.entries else None

    @hookimpl
    def next_cluster_event(self, now):
        self.event_polls += 1
        return self.events.popleft() if self.events else None


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user and repository config files out of every test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("LOGSCOPE_GIT_ROOT", str(tmp_path / "no-repo"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def t0():
    """Fixed reference time for deterministic tests."""
    return T0


@pytest.fixture
def clock():
    """Manual clock starting at T0."""
    return ManualClock(T0)


@pytest.fixture
def make_entry():
    """Factory for LogEntry objects with sensible defaults."""
    counter = itertools.count(1)

    def _make(
        message="Request handled",
        level="INFO",
        source="pod-a",
        timestamp=None,
        id=None,
        age=0,
        container=None,
    ):
        if timestamp is None:
            timestamp = T0 - timedelta(seconds=age)
        return LogEntry(
            id=id or f"e{next(counter)}",
            timestamp=timestamp,
            level=level,
            message=message,
            source=source,
            container=container,
        )

    return _make


@pytest.fixture
def make_event():
    """Factory for raw cluster event dicts in the camelCase API shape."""
    counter = itertools.count(1)

    def _make(message="Back-off restarting failed container", type="Warning",
              reason="BackOff", id=None, count=1):
        return {
            "id": id or f"ev{next(counter)}",
            "type": type,
            "reason": reason,
            "message": message,
            "source": "kubelet",
            "firstTime": T0.isoformat(),
            "lastTime": T0.isoformat(),
            "count": count,
            "involvedObject": {"kind": "Pod", "name": "pod-a", "namespace": "default"},
        }

    return _make


@pytest.fixture
def producer():
    """Empty ListProducer; push records onto it as needed."""
    return ListProducer()


@pytest.fixture
def text_log(tmp_path):
    """Plain-text log file with mixed severities."""
    content = """\
Starting server on port 8080
WARNING: slow response from upstream
ERROR: connection refused to db:5432

DEBUG: cache warmed
"""
    f = tmp_path / "app.log"
    f.write_text(content)
    return f


@pytest.fixture
def jsonl_log(tmp_path):
    """JSON-lines file with two log entries and one event."""
    lines = [
        '{"id": "a1", "timestamp": "2024-05-01T11:59:00Z", "level": "INFO", '
        '"message": "Request handled", "source": "pod-a"}',
        '{"kind": "event", "id": "ev1", "type": "Warning", "reason": "BackOff", '
        '"message": "Back-off restarting failed container", "source": "kubelet", '
        '"firstTime": "2024-05-01T11:58:00Z", "lastTime": "2024-05-01T11:59:00Z", '
        '"count": 3, "involvedObject": {"kind": "Pod", "name": "pod-a"}}',
        '{"id": "a2", "timestamp": "2024-05-01T11:59:30Z", "level": "ERROR", '
        '"message": "ERROR: permission denied", "source": "pod-b"}',
    ]
    f = tmp_path / "stream.jsonl"
    f.write_text("\n".join(lines) + "\n")
    return f


# Pytest markers
def pytest_configure(config):
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
