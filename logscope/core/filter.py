"""FilterEngine for selecting the visible subset of the entry stream.

Each dimension of a FilterCriteria is an independent predicate. An entry is
visible when every predicate accepts it, so the order in which predicates
run never changes the verdict. The engine keeps no state between entries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable

from logscope.core.classifier import ClassifiedEntry, Classifier
from logscope.models.criteria import ALL_SOURCES, TIME_RANGE_SECONDS, FilterCriteria
from logscope.models.entry import LEVELS, ClusterEvent, LogEntry

Predicate = Callable[[ClassifiedEntry, FilterCriteria, datetime], bool]


def within_time_range(timestamp: datetime, time_range: str, now: datetime) -> bool:
    """Check whether a timestamp is recent enough for ``time_range``.

    The bound is inclusive: with "5m", an entry exactly 300 seconds old is
    still visible. Entries stamped in the future have a negative age and
    always pass.
    """
    bound = TIME_RANGE_SECONDS[time_range]
    if bound is None:
        return True
    age = (now - timestamp).total_seconds()
    return age <= bound


def _search_matches(text: str, query: str) -> bool:
    return not query or query.lower() in text.lower()


def critical_predicate(item: ClassifiedEntry, criteria: FilterCriteria, now: datetime) -> bool:
    return not criteria.critical_only or item.is_critical


def level_predicate(item: ClassifiedEntry, criteria: FilterCriteria, now: datetime) -> bool:
    return item.effective_level in criteria.levels


def sources_predicate(item: ClassifiedEntry, criteria: FilterCriteria, now: datetime) -> bool:
    return not criteria.sources or item.entry.source in criteria.sources


def selected_source_predicate(
    item: ClassifiedEntry, criteria: FilterCriteria, now: datetime
) -> bool:
    pinned = criteria.selected_source
    return pinned == ALL_SOURCES or item.entry.source == pinned


def search_predicate(item: ClassifiedEntry, criteria: FilterCriteria, now: datetime) -> bool:
    return _search_matches(item.entry.message, criteria.search_query)


def time_range_predicate(item: ClassifiedEntry, criteria: FilterCriteria, now: datetime) -> bool:
    return within_time_range(item.entry.timestamp, criteria.time_range, now)


PREDICATES: tuple[Predicate, ...] = (
    critical_predicate,
    level_predicate,
    sources_predicate,
    selected_source_predicate,
    search_predicate,
    time_range_predicate,
)


@dataclass
class FilterStats:
    """Statistics about a filter pass.

    Attributes:
        total_entries: Number of entries examined.
        matched_entries: Number of entries that passed every predicate.
        match_percentage: Percentage of entries that matched (0.0-100.0).
        per_level: Matched entries counted by effective level.
    """

    total_entries: int
    matched_entries: int
    match_percentage: float
    per_level: dict[str, int] = field(default_factory=dict)


class FilterEngine:
    """Evaluate FilterCriteria against buffered entries and events.

    Entries come back in buffer order. The engine never sorts by
    timestamp; timestamps only feed the time-range predicate.
    """

    def __init__(
        self,
        classifier: Classifier | None = None,
        predicates: Iterable[Predicate] = PREDICATES,
    ):
        self.classifier = classifier or Classifier()
        self.predicates: tuple[Predicate, ...] = tuple(predicates)

    def entry_passes(
        self,
        item: ClassifiedEntry,
        criteria: FilterCriteria,
        now: datetime,
    ) -> bool:
        """Check a classified entry against every predicate."""
        return all(predicate(item, criteria, now) for predicate in self.predicates)

    def apply(
        self,
        entries: Iterable[LogEntry],
        criteria: FilterCriteria,
        now: datetime,
    ) -> list[ClassifiedEntry]:
        """Classify entries and keep those visible under ``criteria``.

        Args:
            entries: Entries in buffer order.
            criteria: The current view configuration.
            now: Reference time for the time-range predicate.

        Returns:
            Visible entries with their classification, in input order.
            An empty list is a valid result.
        """
        result: list[ClassifiedEntry] = []
        for entry in entries:
            item = self.classifier.classify(entry)
            if self.entry_passes(item, criteria, now):
                result.append(item)
        return result

    def apply_events(
        self,
        events: Iterable[ClusterEvent],
        criteria: FilterCriteria,
        now: datetime,
    ) -> list[ClusterEvent]:
        """Filter cluster events.

        Events go through a reduced pipeline: only the search text applies,
        matched against the event message.
        """
        return [
            event for event in events
            if _search_matches(event.message, criteria.search_query)
        ]

    def get_stats(
        self,
        entries: Iterable[LogEntry],
        criteria: FilterCriteria,
        now: datetime,
    ) -> FilterStats:
        """Calculate statistics about a filter pass.

        Args:
            entries: Entries to analyze.
            criteria: The current view configuration.
            now: Reference time for the time-range predicate.

        Returns:
            FilterStats with total and matched counts, the match percentage,
            and matched counts per effective level.
        """
        entries = list(entries)
        total = len(entries)
        matched = self.apply(entries, criteria, now)

        per_level: dict[str, int] = {level: 0 for level in LEVELS}
        for item in matched:
            per_level[item.effective_level] = per_level.get(item.effective_level, 0) + 1

        if total > 0:
            percentage = (len(matched) / total) * 100.0
        else:
            percentage = 0.0

        return FilterStats(
            total_entries=total,
            matched_entries=len(matched),
            match_percentage=percentage,
            per_level=per_level,
        )
