"""Sink contract for draining samples and lifecycle events.

All sinks implement this interface so the collector never has to know where
telemetry ends up (log lines, a StatsD daemon, a test recorder, ...).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from dockerstats.core.schemas import Container, MetricKind, Sample


class Adapter(ABC):
    """Abstract base class for sinks.

    Implementations:
    - NullAdapter: discards everything
    - LogAdapter: writes rendered lines to a stream
    - StatsdAdapter: sends gauges and counters to a StatsD daemon

    Methods are called concurrently from every attachment thread and the
    event loop; implementations own their thread-safety. Delivery failures
    should be raised as ``SinkError``.
    """

    @abstractmethod
    def sample(self, container: Container, name: str, value: int) -> None:
        """Record a gauge-like reading."""
        pass

    @abstractmethod
    def incr(self, container: Container, name: str, value: int) -> None:
        """Increment a counter."""
        pass

    def send(self, sample: Sample) -> None:
        """Route a Sample to ``sample`` or ``incr`` by its kind."""
        if sample.kind is MetricKind.COUNT:
            self.incr(sample.container, sample.name, sample.value)
        else:
            self.sample(sample.container, sample.name, sample.value)


class NullAdapter(Adapter):
    """Adapter that drops all telemetry. Used when no sink is configured."""

    def sample(self, container: Container, name: str, value: int) -> None:
        pass

    def incr(self, container: Container, name: str, value: int) -> None:
        pass
