"""Tests for ProducerManager registration, discovery and auto-detection."""

from pathlib import Path

import pytest

from logscope.core.producers import (
    NoProducerFoundError,
    ProducerConflictError,
    ProducerManager,
    builtin_producers,
)
from logscope.plugin import ProducerPlugin, hookimpl


class FixedScoreProducer(ProducerPlugin):
    """Producer reporting a fixed confidence for every file."""

    needs_file = True

    def __init__(self, name, score):
        self.name = name
        self.score = score

    @hookimpl
    def can_handle(self, path):
        return self.score


class TestRegistration:
    """Tests for registering and looking up producers."""

    def test_register_and_get(self):
        manager = ProducerManager()
        producer = FixedScoreProducer("fixed", 0.7)
        manager.register(producer)
        assert manager.get_producer("fixed") is producer
        assert manager.list_producers() == ["fixed"]

    def test_register_replaces_same_name(self):
        manager = ProducerManager()
        manager.register(FixedScoreProducer("fixed", 0.1))
        second = FixedScoreProducer("fixed", 0.9)
        manager.register(second)
        assert manager.get_producer("fixed") is second
        assert manager.list_producers() == ["fixed"]

    def test_unregister(self):
        manager = ProducerManager()
        manager.register(FixedScoreProducer("fixed", 0.1))
        manager.unregister("fixed")
        assert manager.get_producer("fixed") is None
        manager.unregister("fixed")

    def test_get_unknown(self):
        assert ProducerManager().get_producer("nope") is None
        assert ProducerManager().get_producer_info("nope") is None

    def test_producer_info(self):
        manager = ProducerManager()
        manager.discover()
        info = manager.get_producer_info("scenario")
        assert info["name"] == "scenario"
        assert info["version"] == "1.0.0"
        assert "scenario" in info["description"].lower()


class TestDiscovery:
    """Tests for entry-point and built-in discovery."""

    def test_builtins_available(self):
        manager = ProducerManager()
        manager.discover()
        assert {"scenario", "textfile", "jsonl"} <= set(manager.list_producers())

    def test_discover_twice_registers_nothing_new(self):
        manager = ProducerManager()
        manager.discover()
        assert manager.discover() == []

    def test_builtin_producers(self):
        names = [producer.name for producer in builtin_producers()]
        assert names == ["scenario", "textfile", "jsonl"]


class TestAutoDetect:
    """Tests for picking a file producer by confidence."""

    def test_single_high_confidence(self, tmp_path):
        manager = ProducerManager()
        manager.register(FixedScoreProducer("low", 0.2))
        manager.register(FixedScoreProducer("high", 0.8))
        assert manager.auto_detect(tmp_path / "x.log") == "high"

    def test_conflict(self, tmp_path):
        manager = ProducerManager()
        manager.register(FixedScoreProducer("a", 0.8))
        manager.register(FixedScoreProducer("b", 0.6))
        with pytest.raises(ProducerConflictError, match="--producer"):
            manager.auto_detect(tmp_path / "x.log")

    def test_none_confident(self, tmp_path):
        manager = ProducerManager()
        manager.register(FixedScoreProducer("a", 0.3))
        with pytest.raises(NoProducerFoundError, match="Best match: a"):
            manager.auto_detect(tmp_path / "x.log")

    def test_no_producers(self):
        with pytest.raises(NoProducerFoundError):
            ProducerManager().auto_detect(Path("x.log"))

    def test_builtins_pick_textfile(self, text_log):
        manager = ProducerManager()
        manager.discover()
        assert manager.auto_detect(text_log) == "textfile"

    def test_builtins_pick_jsonl(self, jsonl_log):
        manager = ProducerManager()
        manager.discover()
        assert manager.auto_detect(jsonl_log) == "jsonl"

    def test_failing_can_handle_ignored(self, tmp_path):
        class Broken(FixedScoreProducer):
            @hookimpl
            def can_handle(self, path):
                raise OSError("unreadable")

        manager = ProducerManager()
        manager.register(Broken("broken", 0.0))
        manager.register(FixedScoreProducer("ok", 0.9))
        assert manager.auto_detect(tmp_path / "x.log") == "ok"
