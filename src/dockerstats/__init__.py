"""dockerstats - relay Docker container metrics and lifecycle events to a sink."""

from __future__ import annotations

from dockerstats.adapters import Adapter, LogAdapter, NullAdapter, StatsdAdapter, new_adapter
from dockerstats.core.schemas import CollectorConfig, Container, Event, MetricKind, Sample
from dockerstats.monitoring.runtime import DockerRuntimeClient, RuntimeClient
from dockerstats.monitoring.watcher import StatsCollector

__version__ = "0.1.0"

__all__ = [
    "Adapter",
    "CollectorConfig",
    "Container",
    "DockerRuntimeClient",
    "Event",
    "LogAdapter",
    "MetricKind",
    "new_adapter",
    "NullAdapter",
    "RuntimeClient",
    "Sample",
    "StatsCollector",
    "StatsdAdapter",
    "__version__",
]
