"""Monitoring module - lifecycle watching and metric streaming.

Components:
- StatsCollector: event loop that starts and stops attachments
- ContainerRegistry: shared map of known containers and their attachments
- MetricStreamAttachment: per-container streaming thread
- SamplingGate: non-blocking throttle
- RuntimeClient / DockerRuntimeClient: container runtime access
"""

from __future__ import annotations

from dockerstats.monitoring.attachment import MetricStreamAttachment
from dockerstats.monitoring.flatten import flatten_stats
from dockerstats.monitoring.registry import ContainerRegistry, normalize_name
from dockerstats.monitoring.runtime import DockerRuntimeClient, RuntimeClient, parse_event
from dockerstats.monitoring.ticker import SamplingGate
from dockerstats.monitoring.watcher import StatsCollector

__all__ = [
    "ContainerRegistry",
    "DockerRuntimeClient",
    "flatten_stats",
    "MetricStreamAttachment",
    "normalize_name",
    "parse_event",
    "RuntimeClient",
    "SamplingGate",
    "StatsCollector",
]
