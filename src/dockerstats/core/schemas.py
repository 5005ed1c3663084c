"""Data contracts for dockerstats.

``CollectorConfig`` and ``Container`` are pydantic models (validated at the
edges); samples and events are short-lived dataclasses produced on the hot
path and discarded once a sink has seen them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from dockerstats.core.constants import (
    DEFAULT_EVENT_WHITELIST,
    DEFAULT_RESOLUTION,
    DEFAULT_URL,
)


class MetricKind(str, Enum):
    """How a sink should treat a value."""

    SAMPLE = "sample"  # Gauge-like point-in-time reading
    COUNT = "count"  # Monotonic counter increment


class Container(BaseModel):
    """Resolved metadata for one container.

    Attributes:
        id: Opaque runtime-assigned identifier
        name: Display name, leading path separator stripped by the registry
        env: Environment as ordered ``KEY=VALUE`` strings
    """

    id: str = Field(..., min_length=1)
    name: str = ""
    env: tuple[str, ...] = ()

    model_config = {"frozen": True}

    @property
    def short_id(self) -> str:
        return self.id[:12]

    def getenv(self, key: str, default: str = "") -> str:
        """Return the value of the first ``key=...`` entry in the environment."""
        prefix = f"{key}="
        for entry in self.env:
            if entry.startswith(prefix):
                return entry[len(prefix) :]
        return default


@dataclass(frozen=True)
class Sample:
    """A single metric reading tied to a container."""

    container: Container
    name: str
    value: int
    kind: MetricKind = MetricKind.SAMPLE


@dataclass(frozen=True)
class Event:
    """A lifecycle occurrence for a registered container."""

    container: Container
    status: str
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def metric_name(self) -> str:
        """Notification name, e.g. ``Container.Start`` or ``Container.Exec_start``."""
        return f"Container.{self.status[:1].upper()}{self.status[1:]}"


@dataclass(frozen=True)
class RuntimeEvent:
    """A raw lifecycle event, normalized by the runtime client."""

    container_id: str
    status: str
    timestamp: datetime = field(default_factory=datetime.now)


class CollectorConfig(BaseModel):
    """Top-level collector configuration.

    Loaded from YAML/JSON files and overridden by CLI flags or environment.
    """

    url: str = Field(default=DEFAULT_URL, description="Sink URL (log:// or statsd://host:port)")
    template: str | None = Field(
        default=None, description="Metric-name template; None uses the sink's default"
    )
    whitelist: list[str] = Field(
        default_factory=list, description="Event status allow-list override. Empty = default"
    )
    resolution: int = Field(
        default=DEFAULT_RESOLUTION, ge=0, description="Sampling resolution in seconds"
    )
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure the URL carries a scheme."""
        if "://" not in v:
            raise ValueError(f"sink URL must look like scheme://..., got {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {v!r}")
        return level

    @field_validator("whitelist", mode="before")
    @classmethod
    def split_whitelist(cls, v: object) -> object:
        """Accept comma-separated strings as well as lists (of possibly comma-separated items)."""
        if isinstance(v, str):
            v = [v]
        if isinstance(v, list | tuple):
            statuses = (part.strip().lower() for item in v for part in str(item).split(","))
            return [s for s in statuses if s]
        return v

    @property
    def effective_resolution(self) -> int:
        """Resolution in seconds, with 0 meaning the default."""
        return self.resolution or DEFAULT_RESOLUTION

    @property
    def event_whitelist(self) -> frozenset[str]:
        """Statuses the collector handles."""
        if self.whitelist:
            return frozenset(self.whitelist)
        return DEFAULT_EVENT_WHITELIST
