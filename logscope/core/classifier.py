"""Severity detection and critical-pattern matching for log entries.

Classification is a pure function of the message text plus a static,
ordered rule list. The stored ``LogEntry.level`` is never consulted by the
default level detector: the keyword found in the message is treated as the
more reliable severity signal, and it wins whenever the two disagree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from logscope.models.entry import LogEntry
from logscope.models.pattern import CriticalPattern

# (level, keywords) in priority order; first hit wins
_LEVEL_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("ERROR", ("ERROR", "FATAL", "PANIC")),
    ("WARN", ("WARN", "WARNING")),
    ("INFO", ("INFO", "INFORMATION")),
    ("DEBUG", ("DEBUG", "TRACE")),
)

DEFAULT_DETECTED_LEVEL = "INFO"


def detect_level(message: str) -> str:
    """Detect a severity level from keywords in a message.

    The scan is a case-insensitive substring search. Note that TRACE
    keywords map to DEBUG, and a message without any keyword is INFO.

    Args:
        message: Raw message text.

    Returns:
        One of "ERROR", "WARN", "INFO", "DEBUG".
    """
    upper = message.upper()
    for level, keywords in _LEVEL_KEYWORDS:
        if any(keyword in upper for keyword in keywords):
            return level
    return DEFAULT_DETECTED_LEVEL


CANONICAL_PATTERNS: tuple[CriticalPattern, ...] = (
    CriticalPattern(
        pattern=r"panic:|fatal:|segfault|segmentation fault",
        classification="critical",
        description="Application crash detected",
        suggestion="Check application code and resource limits",
    ),
    CriticalPattern(
        pattern=r"missing environment variable|env.*not found|undefined.*variable",
        classification="error",
        description="Missing environment variable",
        suggestion="Add missing environment variables to deployment",
    ),
    CriticalPattern(
        pattern=r"connection refused|connection timeout|network unreachable",
        classification="error",
        description="Network connectivity issue",
        suggestion="Check service endpoints and network policies",
    ),
    CriticalPattern(
        pattern=r"out of memory|oom|memory limit exceeded",
        classification="critical",
        description="Memory limit exceeded",
        suggestion="Increase memory limits or optimize application",
    ),
    CriticalPattern(
        pattern=r"permission denied|access denied|forbidden",
        classification="error",
        description="Permission issue",
        suggestion="Check RBAC permissions and service accounts",
    ),
    CriticalPattern(
        pattern=r"image.*not found|pull.*failed|imagepullbackoff",
        classification="error",
        description="Container image issue",
        suggestion="Verify image name, tag, and registry access",
    ),
    CriticalPattern(
        pattern=r"liveness probe failed|readiness probe failed",
        classification="warning",
        description="Health check failure",
        suggestion="Check probe configuration and application health",
    ),
)


@dataclass(frozen=True)
class ClassifiedEntry:
    """A log entry together with its derived classification.

    Attributes:
        entry: The original, untouched entry.
        effective_level: Level used for filtering and display.
        critical: First matching critical pattern, if any.
    """

    entry: LogEntry
    effective_level: str
    critical: Optional[CriticalPattern] = None

    @property
    def is_critical(self) -> bool:
        return self.critical is not None


class Classifier:
    """Assign an effective level and critical annotation to entries.

    The pattern list is scanned linearly and the first matching rule wins;
    there is no scoring. Extra rules passed in are appended after the
    canonical ones by the caller, so canonical precedence holds.

    Attributes:
        patterns: Ordered, immutable rule list.
        level_detector: Function mapping a message to an effective level.
    """

    def __init__(
        self,
        patterns: Iterable[CriticalPattern] | None = None,
        level_detector: Callable[[str], str] = detect_level,
    ):
        self.patterns: tuple[CriticalPattern, ...] = (
            tuple(patterns) if patterns is not None else CANONICAL_PATTERNS
        )
        self.level_detector = level_detector

    @classmethod
    def with_extra_patterns(cls, extra: Iterable[CriticalPattern]) -> "Classifier":
        """Build a classifier with ``extra`` rules after the canonical list."""
        return cls(patterns=CANONICAL_PATTERNS + tuple(extra))

    def match_critical_pattern(self, message: str) -> CriticalPattern | None:
        """Return the first rule matching ``message``, or None."""
        for pattern in self.patterns:
            if pattern.matches(message):
                return pattern
        return None

    def effective_level(self, entry: LogEntry) -> str:
        return self.level_detector(entry.message)

    def classify(self, entry: LogEntry) -> ClassifiedEntry:
        """Classify an entry without modifying it."""
        return ClassifiedEntry(
            entry=entry,
            effective_level=self.effective_level(entry),
            critical=self.match_critical_pattern(entry.message),
        )
