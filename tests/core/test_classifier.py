"""Tests for level detection and critical-pattern classification."""

import pytest

from logscope.core.classifier import CANONICAL_PATTERNS, Classifier, detect_level
from logscope.models.pattern import CriticalPattern


class TestDetectLevel:
    """Tests for keyword-based level detection."""

    @pytest.mark.parametrize("message,expected", [
        ("ERROR: disk failure", "ERROR"),
        ("fatal exception in main loop", "ERROR"),
        ("kernel panic", "ERROR"),
        ("Warning: deprecated flag", "WARN"),
        ("WARN retrying", "WARN"),
        ("info: started", "INFO"),
        ("debug: cache hit", "DEBUG"),
        ("trace id=7 entering handler", "DEBUG"),
        ("Request processed successfully", "INFO"),
        ("", "INFO"),
    ])
    def test_detect_level(self, message, expected):
        assert detect_level(message) == expected

    def test_error_beats_warn(self):
        assert detect_level("WARN: previous ERROR repeated") == "ERROR"

    def test_information_is_info(self):
        assert detect_level("For your information") == "INFO"


class TestCanonicalPatterns:
    """Tests for the built-in pattern list."""

    def test_pattern_count_and_order(self):
        descriptions = [p.description for p in CANONICAL_PATTERNS]
        assert descriptions == [
            "Application crash detected",
            "Missing environment variable",
            "Network connectivity issue",
            "Memory limit exceeded",
            "Permission issue",
            "Container image issue",
            "Health check failure",
        ]

    @pytest.mark.parametrize("message,description", [
        ("panic: runtime error", "Application crash detected"),
        ("Segmentation fault (core dumped)", "Application crash detected"),
        ("env var DATABASE_URL not found", "Missing environment variable"),
        ("dial tcp: connection refused", "Network connectivity issue"),
        ("container OOMKilled", "Memory limit exceeded"),
        ("open /etc/secret: permission denied", "Permission issue"),
        ("ImagePullBackOff for app:1.2", "Container image issue"),
        ("Readiness probe failed: HTTP 503", "Health check failure"),
    ])
    def test_canonical_match(self, message, description):
        match = Classifier().match_critical_pattern(message)
        assert match is not None
        assert match.description == description

    def test_no_match(self):
        assert Classifier().match_critical_pattern("Request processed successfully") is None


class TestClassifier:
    """Tests for Classifier behavior."""

    def test_first_match_wins(self):
        # Matches both the network and the permission rules
        classifier = Classifier()
        match = classifier.match_critical_pattern("connection refused: access denied")
        assert match.description == "Network connectivity issue"

    def test_env_var_rule_precedes_network_rule(self):
        match = Classifier().match_critical_pattern(
            "connection refused: missing environment variable DB_URL"
        )
        assert match is CANONICAL_PATTERNS[1]
        assert match.description == "Missing environment variable"

    def test_heuristic_level_overrides_declared(self, make_entry):
        entry = make_entry(message="ERROR: x", level="INFO")
        item = Classifier().classify(entry)
        assert item.effective_level == "ERROR"
        assert entry.level == "INFO"

    def test_declared_level_ignored_without_keyword(self, make_entry):
        entry = make_entry(message="something happened", level="ERROR")
        assert Classifier().classify(entry).effective_level == "INFO"

    def test_classify_attaches_pattern(self, make_entry):
        item = Classifier().classify(make_entry(message="Liveness probe failed"))
        assert item.is_critical
        assert item.critical.classification == "warning"

    def test_classify_plain_entry(self, make_entry):
        item = Classifier().classify(make_entry(message="all good"))
        assert not item.is_critical
        assert item.critical is None

    def test_classification_is_deterministic(self, make_entry):
        classifier = Classifier()
        entry = make_entry(message="ERROR: out of memory")
        assert classifier.classify(entry) == classifier.classify(entry)

    def test_custom_patterns_only(self):
        custom = CriticalPattern(pattern="disk full", classification="critical",
                                 description="Disk exhausted")
        classifier = Classifier(patterns=[custom])
        assert classifier.match_critical_pattern("disk full") is custom
        assert classifier.match_critical_pattern("connection refused") is None

    def test_extra_patterns_after_canonical(self):
        extra = CriticalPattern(pattern="refused", classification="warning",
                                description="Refusal")
        classifier = Classifier.with_extra_patterns([extra])
        assert classifier.patterns[-1] is extra
        assert len(classifier.patterns) == len(CANONICAL_PATTERNS) + 1
        # Canonical rule still wins
        match = classifier.match_critical_pattern("connection refused")
        assert match.description == "Network connectivity issue"
        assert classifier.match_critical_pattern("request refused") is extra

    def test_custom_level_detector(self, make_entry):
        classifier = Classifier(level_detector=lambda message: "TRACE")
        assert classifier.classify(make_entry()).effective_level == "TRACE"
