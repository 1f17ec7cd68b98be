"""Tests for the Aggregator and summary counts."""

from logscope.core.classifier import Classifier
from logscope.core.summary import Aggregator, SummaryCounts


def classify_all(entries):
    classifier = Classifier()
    return [classifier.classify(entry) for entry in entries]


class TestSummaryCounts:
    """Tests for total/critical counting."""

    def test_counts(self, make_entry):
        items = classify_all([
            make_entry(message="connection refused"),
            make_entry(message="ok"),
            make_entry(message="permission denied"),
        ])
        assert Aggregator().summary_counts(items) == SummaryCounts(total=3, critical=2)

    def test_empty(self):
        assert Aggregator().summary_counts([]) == SummaryCounts(total=0, critical=0)


class TestCountByLevel:
    """Tests for per-level counting."""

    def test_zero_filled(self, make_entry):
        counts = Aggregator().count_by_level(classify_all([make_entry(message="ERROR: x")]))
        assert counts == {"ERROR": 1, "WARN": 0, "INFO": 0, "DEBUG": 0, "TRACE": 0}


class TestGroupByPattern:
    """Tests for grouping critical entries by matched pattern."""

    def test_groups(self, make_entry):
        items = classify_all([
            make_entry(message="connection refused", source="pod-a"),
            make_entry(message="connection timeout", source="pod-b"),
            make_entry(message="connection refused", source="pod-a"),
            make_entry(message="ok"),
        ])
        groups = Aggregator().group_by_pattern(items)
        assert list(groups) == ["Network connectivity issue"]
        stats = groups["Network connectivity issue"]
        assert stats.count == 3
        assert stats.sources == ["pod-a", "pod-b"]
        assert stats.classification == "error"
        assert stats.suggestion

    def test_sorted_by_classification_then_count(self, make_entry):
        items = classify_all([
            make_entry(message="liveness probe failed"),
            make_entry(message="permission denied"),
            make_entry(message="permission denied"),
            make_entry(message="connection refused"),
            make_entry(message="segfault"),
        ])
        aggregator = Aggregator()
        ordered = [key for key, _ in aggregator.sorted_groups(aggregator.group_by_pattern(items))]
        assert ordered == [
            "Application crash detected",
            "Permission issue",
            "Network connectivity issue",
            "Health check failure",
        ]
