"""Core module - configuration, schemas and errors."""

from __future__ import annotations

from dockerstats.core.config import load_config
from dockerstats.core.constants import DEFAULT_EVENT_WHITELIST, DEFAULT_RESOLUTION
from dockerstats.core.errors import (
    AttachmentFault,
    ConfigError,
    DockerStatsError,
    InspectionError,
    SinkError,
    StartupError,
    StreamOpenError,
    SubscriptionError,
    UnexpectedStop,
)
from dockerstats.core.schemas import (
    CollectorConfig,
    Container,
    Event,
    MetricKind,
    RuntimeEvent,
    Sample,
)

__all__ = [
    "AttachmentFault",
    "CollectorConfig",
    "ConfigError",
    "Container",
    "DEFAULT_EVENT_WHITELIST",
    "DEFAULT_RESOLUTION",
    "DockerStatsError",
    "Event",
    "InspectionError",
    "load_config",
    "MetricKind",
    "RuntimeEvent",
    "Sample",
    "SinkError",
    "StartupError",
    "StreamOpenError",
    "SubscriptionError",
    "UnexpectedStop",
]
