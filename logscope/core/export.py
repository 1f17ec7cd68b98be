"""Serialization of the filtered view.

The text format is one line per visible entry::

    [2024-05-01T12:00:00.000Z] ERROR pod-a: connection refused

Lines are joined with newlines and carry no trailing newline. The output
depends only on the entries passed in, so exporting an unchanged view twice
gives byte-identical text.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Iterable

from logscope.core.classifier import ClassifiedEntry


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as UTC ISO-8601 with milliseconds and a Z suffix."""
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_line(item: ClassifiedEntry) -> str:
    entry = item.entry
    return f"[{format_timestamp(entry.timestamp)}] {item.effective_level} {entry.source}: {entry.message}"


def export_text(items: Iterable[ClassifiedEntry]) -> str:
    """Render visible entries in the plain-text export format."""
    return "\n".join(format_line(item) for item in items)


def export_jsonl(items: Iterable[ClassifiedEntry]) -> str:
    """Render visible entries as JSON lines, one object per entry."""
    lines = []
    for item in items:
        entry = item.entry
        obj = {
            "id": entry.id,
            "timestamp": format_timestamp(entry.timestamp),
            "level": entry.level,
            "effective_level": item.effective_level,
            "source": entry.source,
            "container": entry.container,
            "message": entry.message,
            "critical": None,
        }
        if item.critical is not None:
            obj["critical"] = {
                "classification": item.critical.classification,
                "description": item.critical.description,
                "suggestion": item.critical.suggestion,
            }
        lines.append(json.dumps(obj))
    return "\n".join(lines)


def export_filename(now: datetime) -> str:
    """Default download name for an export made at ``now``."""
    return f"k8s-logs-{now.astimezone(timezone.utc).date().isoformat()}.log"
