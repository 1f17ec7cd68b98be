"""CriticalPattern data model for logscope.

A critical pattern is one classification rule. Rules live in an ordered
list and the first one that matches a message wins.
"""

from __future__ import annotations

import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, PrivateAttr, field_validator


class CriticalPattern(BaseModel):
    """A regex rule that flags a message as a known failure condition.

    Attributes:
        pattern: Regular expression, matched case-insensitively anywhere
            in the message.
        classification: "critical", "error" or "warning".
        description: Human-readable name of the condition.
        suggestion: Optional remediation hint.
    """

    model_config = ConfigDict(frozen=True)

    pattern: str
    classification: Literal["critical", "error", "warning"]
    description: str
    suggestion: Optional[str] = None

    _regex: re.Pattern[str] = PrivateAttr()

    @field_validator("pattern")
    @classmethod
    def validate_regex(cls, v: str) -> str:
        """Validate that the pattern is a valid regular expression."""
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid regex pattern: {e}") from e
        return v

    def model_post_init(self, __context) -> None:
        self._regex = re.compile(self.pattern, re.IGNORECASE)

    def matches(self, message: str) -> bool:
        """Check whether this rule matches ``message``."""
        return self._regex.search(message) is not None
