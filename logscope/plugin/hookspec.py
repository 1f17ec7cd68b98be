"""Hook specifications for logscope producers.

A producer supplies raw log entries and cluster events to the engine, one
poll per tick. Producers implement these hooks with the @hookimpl marker.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

import pluggy

if TYPE_CHECKING:
    from logscope.models.entry import ClusterEvent, LogEntry

hookspec = pluggy.HookspecMarker("logscope")


class LogscopeHookSpec:
    """Hook specification defining the producer interface.

    The stream controller polls the selected producer directly; the pluggy
    PluginManager is used for registration, discovery and ``can_handle``.
    """

    @hookspec
    def can_handle(self, path: Path) -> float:
        """Determine if this producer can replay the given file.

        Args:
            path: Path to a log file.

        Returns:
            Confidence score from 0.0 to 1.0. The producer with the highest
            score of at least 0.5 is selected.
        """

    @hookspec(firstresult=True)
    def next_log_entry(self, now: datetime) -> Union["LogEntry", dict[str, Any], None]:
        """Return the next log entry, or None if there is none this tick.

        Args:
            now: Current time according to the controller's clock.

        Returns:
            A LogEntry, a dict that validates into one, or None. Malformed
            dicts are dropped by the controller.
        """

    @hookspec(firstresult=True)
    def next_cluster_event(self, now: datetime) -> Union["ClusterEvent", dict[str, Any], None]:
        """Return the next cluster event, or None if there is none this tick.

        Args:
            now: Current time according to the controller's clock.

        Returns:
            A ClusterEvent, a dict that validates into one, or None.
        """
