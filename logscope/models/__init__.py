"""Data models for logscope."""

from logscope.models.criteria import (
    ALL_SOURCES,
    TIME_RANGE_SECONDS,
    TIME_RANGES,
    FilterCriteria,
)
from logscope.models.entry import (
    DEFAULT_LEVELS,
    LEVELS,
    ClusterEvent,
    InvolvedObject,
    LogEntry,
)
from logscope.models.pattern import CriticalPattern

__all__ = [
    "ALL_SOURCES",
    "DEFAULT_LEVELS",
    "LEVELS",
    "TIME_RANGES",
    "TIME_RANGE_SECONDS",
    "ClusterEvent",
    "CriticalPattern",
    "FilterCriteria",
    "InvolvedObject",
    "LogEntry",
]
