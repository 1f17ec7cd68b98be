"""Tests for the CriticalPattern model."""

import pytest
from pydantic import ValidationError

from logscope.models.pattern import CriticalPattern


class TestCriticalPattern:
    """Tests for CriticalPattern validation and matching."""

    def test_matches_case_insensitive(self):
        pattern = CriticalPattern(
            pattern=r"connection refused", classification="error", description="Network"
        )
        assert pattern.matches("Connection REFUSED by peer")
        assert not pattern.matches("connection accepted")

    def test_matches_anywhere_in_message(self):
        pattern = CriticalPattern(pattern=r"oom", classification="critical", description="OOM")
        assert pattern.matches("process killed: OOMKilled")

    def test_invalid_regex_rejected(self):
        with pytest.raises(ValidationError, match="Invalid regex pattern"):
            CriticalPattern(pattern=r"[unclosed", classification="error", description="bad")

    def test_unknown_classification_rejected(self):
        with pytest.raises(ValidationError):
            CriticalPattern(pattern="x", classification="fatal", description="bad")

    def test_suggestion_optional(self):
        pattern = CriticalPattern(pattern="x", classification="warning", description="d")
        assert pattern.suggestion is None

    def test_from_dict(self):
        pattern = CriticalPattern.model_validate({
            "pattern": "disk full",
            "classification": "critical",
            "description": "Disk exhausted",
            "suggestion": "Free up space",
        })
        assert pattern.matches("DISK FULL on /var")
