"""Tick-driven ingestion with pause/resume.

The StreamController owns the ingestion lifecycle. Each tick polls the
producer once for a log entry and once for a cluster event, appends what it
got, then notifies subscribers. Ticks never overlap: a tick requested while
another is still running (for example from inside a subscriber) is skipped.

The Ticker is the scheduling half. It decides *when* a tick is due from an
injected clock, so the whole loop can be driven by hand in tests and by a
UI timer in the live viewer.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError

from logscope.core.buffer import DuplicateIdError, EntryBuffer
from logscope.core.clock import Clock, SystemClock
from logscope.models.entry import ClusterEvent, LogEntry
from logscope.plugin import ProducerPlugin

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 5.0


class StreamState(enum.Enum):
    STREAMING = "streaming"
    PAUSED = "paused"


@dataclass(frozen=True)
class TickResult:
    """Outcome of one tick.

    Attributes:
        skipped: True if the tick did nothing (paused or already in flight).
        entry: The log entry appended this tick, if any.
        event: The cluster event appended this tick, if any.
        dropped: Number of producer records rejected this tick.
    """

    skipped: bool = False
    entry: Optional[LogEntry] = None
    event: Optional[ClusterEvent] = None
    dropped: int = 0

    @property
    def produced(self) -> bool:
        return self.entry is not None or self.event is not None


class StreamController:
    """Poll a producer into bounded buffers, one tick at a time.

    Args:
        producer: Source of raw entries and events.
        log_buffer: Destination for log entries.
        event_buffer: Destination for cluster events.
        clock: Time source passed to the producer.
    """

    def __init__(
        self,
        producer: ProducerPlugin,
        log_buffer: EntryBuffer[LogEntry] | None = None,
        event_buffer: EntryBuffer[ClusterEvent] | None = None,
        clock: Clock | None = None,
    ):
        self.producer = producer
        self.log_buffer: EntryBuffer[LogEntry] = (
            log_buffer if log_buffer is not None else EntryBuffer()
        )
        self.event_buffer: EntryBuffer[ClusterEvent] = (
            event_buffer if event_buffer is not None else EntryBuffer()
        )
        self.clock = clock or SystemClock()
        self.state = StreamState.STREAMING
        self.dropped = 0
        self.ticks = 0
        self._in_flight = False
        self._subscribers: list[Callable[[TickResult], None]] = []
        self._reset_subscribers: list[Callable[[], None]] = []

    @property
    def is_streaming(self) -> bool:
        return self.state is StreamState.STREAMING

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    # -- Consumer registration -----------------------------------------------

    def subscribe(self, callback: Callable[[TickResult], None]) -> None:
        """Call ``callback`` after every tick that appended something."""
        self._subscribers.append(callback)

    def on_reset(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` whenever reset() is requested."""
        self._reset_subscribers.append(callback)

    # -- State transitions ---------------------------------------------------

    def pause(self) -> None:
        if self.state is StreamState.PAUSED:
            return
        self.state = StreamState.PAUSED
        logger.info("Stream paused with %d entries buffered", len(self.log_buffer))

    def resume(self) -> None:
        if self.state is StreamState.STREAMING:
            return
        self.state = StreamState.STREAMING
        logger.info("Stream resumed")

    def toggle(self) -> StreamState:
        if self.is_streaming:
            self.pause()
        else:
            self.resume()
        return self.state

    def reset(self) -> None:
        """Ask consumers to clear their rendering state.

        Buffers are left untouched, so calling this repeatedly is harmless.
        """
        self._notify(self._reset_subscribers)

    # -- Ingestion -----------------------------------------------------------

    def tick(self) -> TickResult:
        """Run one ingestion step.

        Returns:
            A TickResult. Skipped ticks never call the producer.
        """
        if not self.is_streaming or self._in_flight:
            return TickResult(skipped=True)

        self._in_flight = True
        try:
            now = self.clock.now()
            dropped_before = self.dropped

            entry = self._ingest(
                lambda: self.producer.next_log_entry(now=now),
                LogEntry,
                self.log_buffer,
            )
            event = self._ingest(
                lambda: self.producer.next_cluster_event(now=now),
                ClusterEvent,
                self.event_buffer,
            )
            self.ticks += 1

            result = TickResult(
                entry=entry,
                event=event,
                dropped=self.dropped - dropped_before,
            )
            if result.produced:
                self._notify(self._subscribers, result)
            return result
        finally:
            self._in_flight = False

    def _notify(self, callbacks: list[Callable[..., None]], *args) -> None:
        # Every callback runs even if an earlier one raised
        for callback in list(callbacks):
            try:
                callback(*args)
            except Exception:
                logger.exception("Stream subscriber %r failed", callback)

    def _ingest(
        self,
        poll: Callable[[], Any],
        model: type[BaseModel],
        buffer: EntryBuffer,
    ):
        try:
            raw = poll()
        except Exception:
            logger.exception("Producer '%s' failed; skipping its output this tick",
                             self.producer.name)
            return None

        if raw is None:
            return None

        try:
            item = raw if isinstance(raw, model) else model.model_validate(raw)
            buffer.append(item)
        except (ValidationError, DuplicateIdError) as e:
            self.dropped += 1
            logger.warning("Dropped malformed %s from '%s': %s",
                           model.__name__, self.producer.name, e)
            return None
        return item

    def run(self, ticks: int) -> list[TickResult]:
        """Run ``ticks`` ticks back to back."""
        return [self.tick() for _ in range(ticks)]

    def drain(self, max_ticks: int = 100_000) -> int:
        """Tick until the producer has nothing more to give.

        Stops at the first tick that yields neither an entry nor an event
        (dropped records count as output), or after ``max_ticks``.

        Returns:
            Number of ticks that produced something.
        """
        productive = 0
        for _ in range(max_ticks):
            result = self.tick()
            if result.skipped or not (result.produced or result.dropped):
                break
            productive += 1
        return productive


class Ticker:
    """Fire a callback once per interval, judged against a clock.

    ``poll()`` is meant to be called often (from a UI timer or a loop).
    It fires at most once per call, and the next boundary is scheduled
    from the time it fired, so a late poll never triggers a burst of
    catch-up ticks.

    Args:
        clock: Time source.
        interval: Seconds between ticks.
        callback: Called with no arguments when a tick is due.
    """

    def __init__(
        self,
        clock: Clock,
        interval: float = DEFAULT_INTERVAL,
        callback: Callable[[], Any] | None = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.clock = clock
        self.interval = interval
        self.callback = callback
        self._next_due: Optional[datetime] = None

    @property
    def running(self) -> bool:
        return self._next_due is not None

    def start(self) -> None:
        if not self.running:
            self._next_due = self.clock.now() + timedelta(seconds=self.interval)

    def stop(self) -> None:
        self._next_due = None

    def poll(self) -> bool:
        """Fire the callback if a tick is due.

        Returns:
            True if the callback ran.
        """
        if self._next_due is None:
            return False
        now = self.clock.now()
        if now < self._next_due:
            return False
        self._next_due = now + timedelta(seconds=self.interval)
        if self.callback is not None:
            self.callback()
        return True
