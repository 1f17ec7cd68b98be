"""Plain-text log replay producer for logscope.

Replays a text file one line per tick. Lines written by logscope's own text
export are parsed back into their timestamp, level and source. Any other
line becomes an entry stamped with the current time, sourced from the file
name, with its level detected from the message keywords.
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from logscope.core.classifier import detect_level
from logscope.models.entry import LogEntry
from logscope.plugin import ProducerPlugin, hookimpl

# [2024-05-01T12:00:00.000Z] ERROR pod-a: message
_EXPORT_LINE_PATTERN = re.compile(
    r"^\[(?P<timestamp>[^\]]+)\]\s+"
    r"(?P<level>ERROR|WARNING|WARN|INFO|DEBUG|TRACE)\s+"
    r"(?P<source>[^\s:]+):\s?(?P<message>.*)$"
)

_SNIFF_LINES = 50


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, accepting a trailing Z."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _read_head(path: Path) -> list[str]:
    lines = []
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for i, line in enumerate(f):
            if i >= _SNIFF_LINES:
                break
            lines.append(line)
    return lines


class TextFileProducer(ProducerPlugin):
    """Replay a text log file, one line per tick."""

    name = "textfile"
    version = "1.0.0"
    description = "Replay plain-text or exported logscope log files"
    needs_file = True

    def __init__(self) -> None:
        self.path: Optional[Path] = None
        self._lines: list[str] = []
        self._position = 0

    def open(self, path: Path) -> None:
        self.path = path
        self._lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
        self._position = 0

    @property
    def exhausted(self) -> bool:
        return self._position >= len(self._lines)

    @hookimpl
    def can_handle(self, path: Path) -> float:
        """Score a file as replayable text.

        Returns:
            0.9 if logscope export lines are present, 0.1 for files that
            look like JSON lines, 0.6 for other readable text.
        """
        if not path.is_file():
            return 0.0

        try:
            head = _read_head(path)
        except OSError:
            return 0.0

        content = [line for line in head if line.strip()]
        if not content:
            return 0.6

        if content[0].lstrip().startswith("{"):
            return 0.1

        if any(_EXPORT_LINE_PATTERN.match(line.rstrip("\n")) for line in content):
            return 0.9

        return 0.6

    @hookimpl
    def next_log_entry(self, now: datetime) -> LogEntry | dict | None:
        while not self.exhausted:
            line_number = self._position + 1
            line = self._lines[self._position]
            self._position += 1
            if line.strip():
                return self._parse_line(line, line_number, now)
        return None

    def _parse_line(self, line: str, line_number: int, now: datetime) -> LogEntry | dict:
        stem = self.path.stem if self.path else "stdin"
        entry_id = f"{stem}-{line_number}"

        match = _EXPORT_LINE_PATTERN.match(line)
        if match:
            timestamp = parse_timestamp(match.group("timestamp"))
            if timestamp is not None:
                return LogEntry(
                    id=entry_id,
                    timestamp=timestamp,
                    level=match.group("level"),
                    message=match.group("message"),
                    source=match.group("source"),
                )

        return LogEntry(
            id=entry_id,
            timestamp=now,
            level=detect_level(line),
            message=line.strip(),
            source=stem,
        )
