"""Synthetic scenario producer for logscope.

Emits one log line per tick drawn from a small message set for the active
troubleshooting scenario, and now and then a matching cluster event.
"""

from __future__ import annotations

import itertools
import random
from datetime import datetime
from typing import Optional

from logscope.models.entry import ClusterEvent, InvolvedObject, LogEntry
from logscope.plugin import ProducerPlugin, hookimpl

SCENARIOS = ("crashloop-1", "imagepull-1", "generic")

# scenario -> (source, container, messages)
_LOG_MESSAGES: dict[str, tuple[str, str, list[str]]] = {
    "crashloop-1": (
        "nginx-deployment-abc123",
        "nginx",
        [
            "Attempting to restart application...",
            "ERROR: Environment variable DATABASE_URL not found",
            "Failed to initialize database connection",
            "Container exiting with code 1",
            "Back-off restarting failed container",
        ],
    ),
    "imagepull-1": (
        "frontend-deployment-ghi789",
        "frontend",
        [
            "Attempting to pull image: private-registry.com/myapp:latest",
            "ERROR: Failed to pull image - access denied",
            "Back-off pulling image",
            "Waiting for image pull to retry",
        ],
    ),
    "generic": (
        "default-pod",
        "app",
        [
            "System health check passed",
            "Processing incoming requests",
            "Memory usage: 45%",
            "CPU usage: 23%",
        ],
    ),
}

# scenario -> (involved object, [(type, reason, message)])
_EVENTS: dict[str, tuple[InvolvedObject, list[tuple[str, str, str]]]] = {
    "crashloop-1": (
        InvolvedObject(kind="Pod", name="nginx-deployment-abc123", namespace="default"),
        [
            ("Warning", "BackOff",
             "Back-off restarting failed container nginx in pod nginx-deployment-abc123"),
            ("Warning", "Unhealthy", "Liveness probe failed: container not responding"),
            ("Normal", "Killing", "Stopping container nginx"),
        ],
    ),
    "imagepull-1": (
        InvolvedObject(kind="Pod", name="frontend-deployment-ghi789", namespace="default"),
        [
            ("Warning", "BackOff", 'Back-off pulling image "private-registry.com/myapp:latest"'),
            ("Warning", "Failed", "Failed to pull image: access denied"),
            ("Normal", "Pulling", 'Pulling image "private-registry.com/myapp:latest"'),
        ],
    ),
    "generic": (
        InvolvedObject(kind="Node", name="worker-node-1"),
        [("Normal", "Heartbeat", "Node heartbeat received")],
    ),
}


def _declared_level(scenario: str, message: str) -> str:
    # The level a naive producer would stamp on the line
    if "ERROR" in message:
        return "ERROR"
    if scenario == "crashloop-1" and "Failed" in message:
        return "WARN"
    if scenario == "imagepull-1" and "Back-off" in message:
        return "WARN"
    return "INFO"


class ScenarioProducer(ProducerPlugin):
    """Random sample lines for a named troubleshooting scenario.

    Args:
        scenario: One of SCENARIOS.
        event_probability: Chance per tick of also emitting an event.
        seed: Seed for the random generator, for repeatable runs.
    """

    name = "scenario"
    version = "1.0.0"
    description = "Synthetic pod logs and events for troubleshooting scenarios"

    def __init__(
        self,
        scenario: str = "generic",
        event_probability: float = 0.3,
        seed: Optional[int] = None,
    ):
        self.configure(scenario=scenario, event_probability=event_probability, seed=seed)
        self._sequence = itertools.count(1)

    def configure(
        self,
        scenario: str = "generic",
        event_probability: float = 0.3,
        seed: Optional[int] = None,
    ) -> None:
        if scenario not in SCENARIOS:
            raise ValueError(
                f"Unknown scenario '{scenario}'. Available: {', '.join(SCENARIOS)}"
            )
        self.scenario = scenario
        self.event_probability = event_probability
        self.rng = random.Random(seed)

    def _next_id(self, prefix: str, now: datetime) -> str:
        return f"{prefix}-{int(now.timestamp() * 1000)}-{next(self._sequence)}"

    @hookimpl
    def next_log_entry(self, now: datetime) -> LogEntry:
        source, container, messages = _LOG_MESSAGES[self.scenario]
        message = self.rng.choice(messages)
        return LogEntry(
            id=self._next_id("log", now),
            timestamp=now,
            level=_declared_level(self.scenario, message),
            message=message,
            source=source,
            container=container,
        )

    @hookimpl
    def next_cluster_event(self, now: datetime) -> ClusterEvent | None:
        if self.rng.random() >= self.event_probability:
            return None
        involved, choices = _EVENTS[self.scenario]
        event_type, reason, message = self.rng.choice(choices)
        return ClusterEvent(
            id=self._next_id("event", now),
            type=event_type,
            reason=reason,
            message=message,
            source="kubelet",
            first_time=now,
            last_time=now,
            count=1,
            involved_object=involved,
        )
