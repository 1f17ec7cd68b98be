"""ViewerSession: the consumer-facing engine facade.

A session wires the producer, buffers, classifier, filter engine and stream
controller together and owns the single live FilterCriteria. It keeps the
result of the latest filter pass, recomputed on every tick (streaming or
paused, productive or empty), whenever the criteria change, or when
``refresh()`` is called. The criteria may be edited through the session or
directly on ``session.criteria``; readers of the view notice the latter and
re-filter first. Within a tick the order is always append, classify,
filter, notify. Between passes the view is as of ``evaluated_at``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from logscope.core.buffer import (
    DEFAULT_MAX_ENTRIES,
    DEFAULT_MAX_EVENTS,
    EntryBuffer,
)
from logscope.core.classifier import ClassifiedEntry, Classifier
from logscope.core.clock import Clock, SystemClock
from logscope.core.export import export_jsonl, export_text
from logscope.core.filter import FilterEngine
from logscope.core.stream import StreamController, TickResult
from logscope.core.summary import Aggregator, SummaryCounts
from logscope.models.criteria import FilterCriteria
from logscope.models.entry import ClusterEvent, LogEntry
from logscope.plugin import ProducerPlugin


class ViewerSession:
    """One viewer session over a live entry stream.

    Args:
        producer: Source of raw entries and events.
        classifier: Classifier to use; defaults to the canonical rules.
        criteria: Initial criteria; defaults to FilterCriteria().
        clock: Time source for ticks and the time-range filter.
        max_entries: Log buffer capacity (None for unbounded).
        max_events: Event buffer capacity (None for unbounded).
    """

    def __init__(
        self,
        producer: ProducerPlugin,
        classifier: Classifier | None = None,
        criteria: FilterCriteria | None = None,
        clock: Clock | None = None,
        max_entries: Optional[int] = DEFAULT_MAX_ENTRIES,
        max_events: Optional[int] = DEFAULT_MAX_EVENTS,
    ):
        self.clock = clock or SystemClock()
        self.classifier = classifier or Classifier()
        self.engine = FilterEngine(self.classifier)
        self.aggregator = Aggregator()
        self._criteria = criteria or FilterCriteria()
        self.controller = StreamController(
            producer,
            log_buffer=EntryBuffer(max_entries),
            event_buffer=EntryBuffer(max_events),
            clock=self.clock,
        )
        self.controller.subscribe(self._on_tick)

        self._visible: list[ClassifiedEntry] = []
        self._visible_events: list[ClusterEvent] = []
        # Criteria as of the last filter pass
        self._applied: Optional[FilterCriteria] = None
        self._evaluated_at: Optional[datetime] = None
        self._subscribers: list[Callable[[], None]] = []

        self.refresh()

    # -- Buffers & criteria --------------------------------------------------

    @property
    def entries(self) -> list[LogEntry]:
        return self.controller.log_buffer.snapshot()

    @property
    def events(self) -> list[ClusterEvent]:
        return self.controller.event_buffer.snapshot()

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def evaluated_at(self) -> Optional[datetime]:
        return self._evaluated_at

    def set_filter_criteria(self, **changes) -> FilterCriteria:
        """Change some criteria fields in place and re-filter.

        Raises:
            ValueError: On unknown field names or invalid values. The
                criteria are left unchanged.
        """
        self._criteria.update(**changes)
        self.refresh()
        return self._criteria

    def toggle_level(self, level: str) -> None:
        self._criteria.toggle_level(level)
        self.refresh()

    def sources(self) -> list[str]:
        """Distinct sources in the log buffer, in first-seen order."""
        return list(dict.fromkeys(entry.source for entry in self.controller.log_buffer))

    # -- Consumer view -------------------------------------------------------

    def subscribe(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` after every filter pass."""
        self._subscribers.append(callback)

    def refresh(self) -> None:
        """Re-run the filter over the buffers and notify subscribers."""
        now = self.clock.now()
        self._visible = self.engine.apply(self.controller.log_buffer, self._criteria, now)
        self._visible_events = self.engine.apply_events(
            self.controller.event_buffer, self._criteria, now
        )
        self._applied = self._criteria.model_copy(deep=True)
        self._evaluated_at = now
        for callback in list(self._subscribers):
            callback()

    def _current(self) -> list[ClassifiedEntry]:
        """The cached view, re-filtered if the criteria were edited in place."""
        if self._criteria != self._applied:
            self.refresh()
        return self._visible

    def visible_entries(self) -> list[ClassifiedEntry]:
        return list(self._current())

    def visible_events(self) -> list[ClusterEvent]:
        self._current()
        return list(self._visible_events)

    def _on_tick(self, result: TickResult) -> None:
        self.refresh()

    # -- Stream control ------------------------------------------------------

    @property
    def is_streaming(self) -> bool:
        return self.controller.is_streaming

    def tick(self) -> TickResult:
        """Run one controller tick and bring the view up to date.

        Productive ticks re-filter through the controller subscription.
        Empty and paused ticks re-filter here, so entries still age out
        of the time range.
        """
        result = self.controller.tick()
        if not result.produced and not self.controller.in_flight:
            self.refresh()
        return result

    def pause(self) -> None:
        self.controller.pause()

    def resume(self) -> None:
        self.controller.resume()

    def reset(self) -> None:
        self.controller.reset()

    def on_reset(self, callback: Callable[[], None]) -> None:
        self.controller.on_reset(callback)

    @property
    def dropped(self) -> int:
        return self.controller.dropped

    # -- Export & summary ----------------------------------------------------

    def export_text(self) -> str:
        return export_text(self._current())

    def export_jsonl(self) -> str:
        return export_jsonl(self._current())

    def summary_counts(self) -> SummaryCounts:
        return self.aggregator.summary_counts(self._current())

    def level_counts(self) -> dict[str, int]:
        return self.aggregator.count_by_level(self._current())
