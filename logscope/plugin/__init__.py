"""Producer plugin system for logscope.

Producers implement the hooks defined in hookspec.py.

Usage:
    from logscope.plugin import ProducerPlugin, hookimpl

    class MyProducer(ProducerPlugin):
        name = "my-producer"

        @hookimpl
        def next_log_entry(self, now):
            return {"id": "1", "timestamp": now, "level": "INFO",
                    "message": "hello", "source": "pod-a"}
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

import pluggy

from logscope.plugin.hookspec import LogscopeHookSpec

if TYPE_CHECKING:
    from logscope.models.entry import ClusterEvent, LogEntry

hookimpl = pluggy.HookimplMarker("logscope")

__all__ = ["ProducerPlugin", "hookimpl", "LogscopeHookSpec"]


class ProducerPlugin:
    """Base class for logscope producers.

    Subclasses must define ``name`` and override the hooks they provide.
    Every hook has a do-nothing default, so a producer that only emits log
    entries does not need to care about events.

    Optional attributes:
        version: Producer version string.
        description: Human-readable description.
        needs_file: True if the producer replays a file given via ``open``.
    """

    name: str = "base"
    version: str = "0.0.0"
    description: str = ""
    needs_file: bool = False

    def open(self, path: Path) -> None:
        """Attach a file to replay. Only file producers override this."""
        raise NotImplementedError(f"Producer '{self.name}' does not read files")

    @hookimpl
    def can_handle(self, path: Path) -> float:
        return 0.0

    @hookimpl
    def next_log_entry(self, now: datetime) -> Union["LogEntry", dict[str, Any], None]:
        return None

    @hookimpl
    def next_cluster_event(self, now: datetime) -> Union["ClusterEvent", dict[str, Any], None]:
        return None
