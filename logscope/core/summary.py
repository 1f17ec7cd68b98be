"""Aggregation and counting over the filtered view.

Counts here feed the stats bar of the live viewer and the CLI's
``--summary`` and ``--format count`` output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional

from logscope.models.entry import LEVELS

if TYPE_CHECKING:
    from logscope.core.classifier import ClassifiedEntry

# Display order for pattern classifications (most severe first)
CLASSIFICATION_ORDER = ["critical", "error", "warning"]

LEVEL_STYLES = {
    "ERROR": "red",
    "WARN": "yellow",
    "INFO": "green",
    "DEBUG": "blue",
    "TRACE": "magenta",
}

CLASSIFICATION_STYLES = {
    "critical": "red bold",
    "error": "red",
    "warning": "yellow",
}


@dataclass(frozen=True)
class SummaryCounts:
    """Size of the filtered view and how much of it is critical."""

    total: int
    critical: int


@dataclass
class PatternStats:
    """Visible entries that matched one critical pattern.

    Attributes:
        description: The pattern's description, used as the group key.
        classification: "critical", "error" or "warning".
        suggestion: Remediation hint, if the pattern has one.
        count: Number of matching entries.
        sources: Sources the matches came from, in first-seen order.
    """

    description: str
    classification: str
    suggestion: Optional[str] = None
    count: int = 0
    sources: list = field(default_factory=list)

    def add(self, item: ClassifiedEntry) -> None:
        self.count += 1
        if item.entry.source not in self.sources:
            self.sources.append(item.entry.source)


class Aggregator:
    """Summaries and breakdowns of classified entries."""

    def summary_counts(self, items: Iterable[ClassifiedEntry]) -> SummaryCounts:
        total = 0
        critical = 0
        for item in items:
            total += 1
            if item.is_critical:
                critical += 1
        return SummaryCounts(total=total, critical=critical)

    def count_by_level(self, items: Iterable[ClassifiedEntry]) -> dict[str, int]:
        """Count entries per effective level, zero-filled for every level."""
        counts = {level: 0 for level in LEVELS}
        for item in items:
            counts[item.effective_level] = counts.get(item.effective_level, 0) + 1
        return counts

    def group_by_pattern(self, items: Iterable[ClassifiedEntry]) -> dict[str, PatternStats]:
        """Group critical entries by the description of the matched pattern.

        Entries without a critical annotation are left out.
        """
        groups: dict[str, PatternStats] = {}
        for item in items:
            if item.critical is None:
                continue
            key = item.critical.description
            if key not in groups:
                groups[key] = PatternStats(
                    description=key,
                    classification=item.critical.classification,
                    suggestion=item.critical.suggestion,
                )
            groups[key].add(item)
        return groups

    def sorted_groups(
        self, groups: dict[str, PatternStats]
    ) -> list[tuple[str, PatternStats]]:
        """Order groups by classification severity, then count descending."""

        def sort_key(pair: tuple[str, PatternStats]):
            key, stats = pair
            try:
                rank = CLASSIFICATION_ORDER.index(stats.classification)
            except ValueError:
                rank = len(CLASSIFICATION_ORDER)
            return (rank, -stats.count, key)

        return sorted(groups.items(), key=sort_key)
