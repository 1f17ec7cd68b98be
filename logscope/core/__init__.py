"""Core logic for logscope.

This module provides the engine:
- Classifier: effective level detection and critical-pattern matching
- FilterEngine: multi-dimensional filtering of the entry stream
- EntryBuffer: bounded, ordered storage
- StreamController / Ticker: tick-driven ingestion with pause/resume
- ViewerSession: the consumer-facing facade
- Aggregator / export: summaries and text export
- ConfigLoader: configuration file loading
- ProducerManager: producer discovery and selection
"""

from logscope.core.buffer import DuplicateIdError, EntryBuffer
from logscope.core.classifier import (
    CANONICAL_PATTERNS,
    ClassifiedEntry,
    Classifier,
    detect_level,
)
from logscope.core.clock import ManualClock, SystemClock
from logscope.core.config import Config, ConfigError, ConfigLoader
from logscope.core.export import export_filename, export_jsonl, export_text
from logscope.core.filter import FilterEngine, FilterStats, within_time_range
from logscope.core.producers import (
    NoProducerFoundError,
    ProducerConflictError,
    ProducerError,
    ProducerManager,
)
from logscope.core.session import ViewerSession
from logscope.core.stream import StreamController, StreamState, Ticker, TickResult
from logscope.core.summary import Aggregator, PatternStats, SummaryCounts

__all__ = [
    "Aggregator",
    "CANONICAL_PATTERNS",
    "ClassifiedEntry",
    "Classifier",
    "Config",
    "ConfigError",
    "ConfigLoader",
    "DuplicateIdError",
    "EntryBuffer",
    "FilterEngine",
    "FilterStats",
    "ManualClock",
    "NoProducerFoundError",
    "PatternStats",
    "ProducerConflictError",
    "ProducerError",
    "ProducerManager",
    "StreamController",
    "StreamState",
    "SummaryCounts",
    "SystemClock",
    "TickResult",
    "Ticker",
    "ViewerSession",
    "detect_level",
    "export_filename",
    "export_jsonl",
    "export_text",
    "within_time_range",
]
