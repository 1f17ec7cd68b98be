"""JSON-lines replay producer for logscope.

Each non-blank line is a JSON object. Objects with ``"kind": "event"`` are
replayed as cluster events; everything else as log entries. Both streams
advance independently, one record each per tick. Records are handed over
as dicts, so malformed ones are dropped and counted by the controller.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from logscope.plugin import ProducerPlugin, hookimpl

logger = logging.getLogger(__name__)

_JSONL_SUFFIXES = {".jsonl", ".ndjson"}


class JsonLinesProducer(ProducerPlugin):
    """Replay log entries and cluster events from a JSON-lines file."""

    name = "jsonl"
    version = "1.0.0"
    description = "Replay log entries and cluster events from JSON lines"
    needs_file = True

    def __init__(self) -> None:
        self.path: Optional[Path] = None
        self._entries: deque[dict[str, Any]] = deque()
        self._events: deque[dict[str, Any]] = deque()
        self.invalid_lines = 0

    def open(self, path: Path) -> None:
        self.path = path
        self._entries.clear()
        self._events.clear()
        self.invalid_lines = 0

        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for line_number, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError:
                    record = None
                if not isinstance(record, dict):
                    self.invalid_lines += 1
                    logger.warning("%s:%d is not a JSON object, skipping", path, line_number)
                    continue
                kind = record.pop("kind", "log")
                if kind == "event":
                    self._events.append(record)
                else:
                    self._entries.append(record)

    @hookimpl
    def can_handle(self, path: Path) -> float:
        if not path.is_file():
            return 0.0
        if path.suffix.lower() in _JSONL_SUFFIXES:
            return 0.95

        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                for line in f:
                    if line.strip():
                        first = line
                        break
                else:
                    return 0.0
        except OSError:
            return 0.0

        try:
            return 0.8 if isinstance(json.loads(first), dict) else 0.0
        except json.JSONDecodeError:
            return 0.0

    @hookimpl
    def next_log_entry(self, now: datetime) -> dict[str, Any] | None:
        return self._entries.popleft() if self._entries else None

    @hookimpl
    def next_cluster_event(self, now: datetime) -> dict[str, Any] | None:
        return self._events.popleft() if self._events else None
