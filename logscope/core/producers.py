"""Producer management for logscope.

This module provides the ProducerManager class that handles producer
discovery via Python entry points and registration with pluggy.
"""

from __future__ import annotations

import logging
from importlib.metadata import entry_points
from pathlib import Path

import pluggy

from logscope.plugin import LogscopeHookSpec, ProducerPlugin

logger = logging.getLogger(__name__)

# Entry point group name for logscope producers
ENTRY_POINT_GROUP = "logscope.producers"


class ProducerError(Exception):
    """Base exception for producer-related errors."""


class ProducerConflictError(ProducerError):
    """Raised when several producers claim high confidence for a file."""


class NoProducerFoundError(ProducerError):
    """Raised when no producer can replay a file."""


def builtin_producers() -> list[ProducerPlugin]:
    """Instantiate the producers shipped with logscope."""
    from logscope.plugins.jsonl import JsonLinesProducer
    from logscope.plugins.scenario import ScenarioProducer
    from logscope.plugins.textfile import TextFileProducer

    return [ScenarioProducer(), TextFileProducer(), JsonLinesProducer()]


class ProducerManager:
    """Manages producer discovery and registration.

    Example:
        manager = ProducerManager()
        manager.discover()
        producer = manager.get_producer("scenario")

        # Pick a file producer by confidence
        name = manager.auto_detect(Path("pods.log"))
    """

    def __init__(self) -> None:
        self.pm = pluggy.PluginManager("logscope")
        self.pm.add_hookspecs(LogscopeHookSpec)
        self._producers: dict[str, ProducerPlugin] = {}

    def register(self, producer: ProducerPlugin) -> None:
        """Register a producer instance, replacing one with the same name."""
        name = producer.name
        if name in self._producers:
            self.unregister(name)
        self._producers[name] = producer
        self.pm.register(producer, name=name)

    def unregister(self, name: str) -> None:
        if name in self._producers:
            producer = self._producers.pop(name)
            self.pm.unregister(producer)

    def discover(self) -> list[str]:
        """Register entry-point producers, then any missing built-ins.

        Returns:
            Names of the producers registered by this call.
        """
        discovered = []

        for ep in entry_points(group=ENTRY_POINT_GROUP):
            try:
                producer_class = ep.load()
                producer = producer_class()
            except Exception:
                logger.warning("Skipping producer entry point %s", ep.name, exc_info=True)
                continue
            if producer.name not in self._producers:
                self.register(producer)
                discovered.append(producer.name)

        # Built-ins stay available when the package is not installed
        for producer in builtin_producers():
            if producer.name not in self._producers:
                self.register(producer)
                discovered.append(producer.name)

        return discovered

    def list_producers(self) -> list[str]:
        return list(self._producers.keys())

    def get_producer(self, name: str) -> ProducerPlugin | None:
        return self._producers.get(name)

    def get_producer_info(self, name: str) -> dict[str, str] | None:
        """Get name, version and description of a producer, or None."""
        producer = self._producers.get(name)
        if producer is None:
            return None

        return {
            "name": producer.name,
            "version": getattr(producer, "version", "0.0.0"),
            "description": getattr(producer, "description", ""),
        }

    def auto_detect(self, path: Path) -> str:
        """Pick the producer best able to replay a file.

        Args:
            path: Path to the log file.

        Returns:
            Name of the single producer with confidence >= 0.5.

        Raises:
            NoProducerFoundError: If no producer reaches 0.5.
            ProducerConflictError: If more than one producer reaches 0.5.
        """
        if not self._producers:
            raise NoProducerFoundError(
                f"No producers registered. Cannot detect a producer for {path}"
            )

        scores: list[tuple[str, float]] = []
        for name, producer in self._producers.items():
            try:
                confidence = producer.can_handle(path)
            except Exception:
                logger.debug("can_handle failed for %s", name, exc_info=True)
                continue
            if confidence is not None:
                scores.append((name, float(confidence)))

        if not scores:
            raise NoProducerFoundError(f"No producer could analyze {path}")

        high_confidence = [(name, score) for name, score in scores if score >= 0.5]

        if not high_confidence:
            best = max(scores, key=lambda x: x[1])
            raise NoProducerFoundError(
                f"No producer has confidence >= 0.5 for {path}. "
                f"Best match: {best[0]} with confidence {best[1]:.2f}"
            )

        if len(high_confidence) > 1:
            conflict_info = ", ".join(
                f"{name} ({score:.2f})" for name, score in high_confidence
            )
            raise ProducerConflictError(
                f"Multiple producers claim confidence >= 0.5 for {path}: {conflict_info}. "
                f"Use --producer to specify which one to use."
            )

        return high_confidence[0][0]
