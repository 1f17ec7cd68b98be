"""FilterCriteria data model for logscope.

One FilterCriteria instance lives for the whole viewer session and is
mutated in place as the user changes the view.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from logscope.models.entry import DEFAULT_LEVELS, LEVELS

TimeRange = Literal["5m", "1h", "24h", "all"]

TIME_RANGES: tuple[str, ...] = ("5m", "1h", "24h", "all")

# Upper bound on entry age in seconds; None means unbounded
TIME_RANGE_SECONDS: dict[str, Optional[int]] = {
    "5m": 5 * 60,
    "1h": 60 * 60,
    "24h": 24 * 60 * 60,
    "all": None,
}

ALL_SOURCES = "all"


class FilterCriteria(BaseModel):
    """The current view configuration.

    An entry is visible only if it satisfies every dimension. Inside a
    set-valued dimension membership is OR'd, and an empty ``sources`` set
    means no source restriction.

    Attributes:
        levels: Admitted effective levels.
        sources: Admitted sources; empty admits all.
        selected_source: A single pinned source, or "all".
        time_range: Maximum entry age: "5m", "1h", "24h" or "all".
        search_query: Case-insensitive substring the message must contain.
        critical_only: Only admit entries with a critical annotation.
    """

    model_config = ConfigDict(validate_assignment=True)

    levels: set[str] = Field(default_factory=lambda: set(DEFAULT_LEVELS))
    sources: set[str] = Field(default_factory=set)
    selected_source: str = ALL_SOURCES
    time_range: TimeRange = "1h"
    search_query: str = ""
    critical_only: bool = False

    @field_validator("levels", mode="before")
    @classmethod
    def normalize_levels(cls, v):
        if isinstance(v, str):
            v = [v]
        return {str(level).strip().upper() for level in v}

    @field_validator("levels")
    @classmethod
    def known_levels(cls, v: set[str]) -> set[str]:
        unknown = v - set(LEVELS)
        if unknown:
            raise ValueError(f"Unknown level(s): {', '.join(sorted(unknown))}")
        return v

    def update(self, **changes) -> "FilterCriteria":
        """Apply a partial change in place.

        All changes are validated before any is applied, so a failing
        update leaves the criteria untouched.

        Raises:
            ValueError: If a key is not a criteria field, or a value fails
                validation.
        """
        unknown = set(changes) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"Unknown filter field(s): {', '.join(sorted(unknown))}")
        validated = type(self).model_validate({**self.model_dump(), **changes})
        for name in changes:
            setattr(self, name, getattr(validated, name))
        return self

    def toggle_level(self, level: str) -> None:
        """Add ``level`` to the admitted set, or remove it if present."""
        level = level.upper()
        current = set(self.levels)
        if level in current:
            current.discard(level)
        else:
            current.add(level)
        self.levels = current
