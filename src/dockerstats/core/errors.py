"""Error taxonomy for the collector.

Fatal errors (``StartupError``, ``UnexpectedStop``, ``ConfigError``) propagate
out of ``StatsCollector.run`` or the adapter factory. Everything else is
handled where it is raised: logged, and the affected container or record is
skipped.
"""

from __future__ import annotations


class DockerStatsError(Exception):
    """Base class for all dockerstats errors."""


class ConfigError(DockerStatsError):
    """Invalid configuration (unknown sink URL, bad template, bad config file)."""


class StartupError(DockerStatsError):
    """The collector cannot start, e.g. running containers cannot be listed."""


class SubscriptionError(StartupError):
    """The lifecycle event feed cannot be subscribed to."""


class InspectionError(DockerStatsError):
    """A specific container cannot be inspected (usually already removed)."""

    def __init__(self, container_id: str, reason: str = "") -> None:
        self.container_id = container_id
        message = f"cannot inspect container {container_id[:12]}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StreamOpenError(DockerStatsError):
    """A stats feed cannot be opened for a container."""

    def __init__(self, container_id: str, reason: str = "") -> None:
        self.container_id = container_id
        message = f"cannot open stats stream for {container_id[:12]}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AttachmentFault(DockerStatsError):
    """A fault while translating or forwarding one stats record."""


class SinkError(DockerStatsError):
    """A sink failed to deliver a sample or event. Never fatal."""


class UnexpectedStop(DockerStatsError):
    """The event subscription ended while the collector was still running."""
