"""LogEntry and ClusterEvent data models for logscope.

These models represent the raw records a producer hands to the engine.
They are frozen: classification results are derived from them, never
written back.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

LogLevel = Literal["ERROR", "WARN", "INFO", "DEBUG", "TRACE"]

# Most severe first
LEVELS: tuple[str, ...] = ("ERROR", "WARN", "INFO", "DEBUG", "TRACE")

DEFAULT_LEVELS: frozenset[str] = frozenset({"INFO", "WARN", "ERROR"})


def ensure_aware(value: datetime) -> datetime:
    """Return ``value`` with a timezone, treating naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class LogEntry(BaseModel):
    """A single observed log line.

    Attributes:
        id: Identifier, unique within the buffer for its lifetime.
        timestamp: When the line was recorded.
        level: Severity declared by the producer. The classifier may
            report a different effective level.
        message: Free-text body.
        source: Emitting unit, e.g. a pod name.
        container: Optional container within the source.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    timestamp: datetime
    level: LogLevel
    message: str
    source: str = Field(min_length=1)
    container: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        if isinstance(v, str):
            v = v.strip().upper()
            # WARNING is a common spelling in producer output
            if v == "WARNING":
                return "WARN"
        return v

    @field_validator("timestamp")
    @classmethod
    def aware_timestamp(cls, v: datetime) -> datetime:
        return ensure_aware(v)


class InvolvedObject(BaseModel):
    """The cluster object a ClusterEvent refers to."""

    model_config = ConfigDict(frozen=True)

    kind: str
    name: str
    namespace: Optional[str] = None


class ClusterEvent(BaseModel):
    """A higher-level lifecycle event, distinct from a log line.

    Repeated occurrences are collapsed into one record, so ``count`` is at
    least 1 and ``last_time`` never precedes ``first_time``. The camelCase
    names used by cluster APIs (``firstTime``, ``involvedObject``...) are
    accepted as input aliases.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    type: Literal["Warning", "Normal"]
    reason: str
    message: str
    source: str
    first_time: datetime = Field(alias="firstTime")
    last_time: datetime = Field(alias="lastTime")
    count: int = Field(default=1, ge=1)
    involved_object: InvolvedObject = Field(alias="involvedObject")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("first_time", "last_time")
    @classmethod
    def aware_times(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @model_validator(mode="after")
    def check_time_order(self) -> "ClusterEvent":
        if self.last_time < self.first_time:
            raise ValueError("last_time must not be earlier than first_time")
        return self
