"""Adapters module - sinks for samples and lifecycle events.

Provides the sink contract and its implementations:
- NullAdapter: discards everything (the default)
- LogAdapter: rendered lines on a text stream
- StatsdAdapter: gauges and counters over StatsD
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

from datadog.dogstatsd import DogStatsd

from dockerstats.adapters.base import Adapter, NullAdapter
from dockerstats.adapters.log_adapter import LogAdapter
from dockerstats.adapters.statsd_adapter import StatsdAdapter
from dockerstats.adapters.templates import L2MET_TEMPLATE, STATSD_TEMPLATE, MetricTemplate
from dockerstats.core.constants import DEFAULT_STATSD_PORT
from dockerstats.core.errors import ConfigError

logger = logging.getLogger(__name__)


def new_adapter(url: str, template: str | None = None) -> Adapter:
    """Build the adapter selected by a sink URL.

    Args:
        url: ``log://`` or ``statsd://host[:port]``
        template: Optional metric template; None uses the adapter's default

    Returns:
        A ready-to-use Adapter

    Raises:
        ConfigError: If the scheme is unknown or the template is invalid
    """
    parts = urlsplit(url)

    if parts.scheme == "log":
        return LogAdapter(template)

    if parts.scheme == "statsd":
        try:
            port = parts.port or DEFAULT_STATSD_PORT
        except ValueError as e:
            raise ConfigError(f"Invalid statsd port in {url!r}") from e
        host = parts.hostname or "localhost"
        logger.info(f"Sending metrics to statsd at {host}:{port}")
        return StatsdAdapter(_plain_statsd_client(host, port), template)

    raise ConfigError(f"unable to find an adapter to handle: {url}")


def _plain_statsd_client(host: str, port: int) -> DogStatsd:
    """DogStatsd restricted to the plain StatsD wire format.

    Client telemetry, origin detection and tags read from ``DATADOG_TAGS`` /
    ``DD_ENV``-style variables all use DogStatsD-only extensions (``|#``,
    ``|c:``) that vanilla StatsD servers reject.
    """
    client = DogStatsd(
        host=host,
        port=port,
        disable_telemetry=True,
        origin_detection_enabled=False,
        disable_buffering=True,
        disable_aggregation=True,
    )
    client.constant_tags = []
    return client


__all__ = [
    "Adapter",
    "L2MET_TEMPLATE",
    "LogAdapter",
    "MetricTemplate",
    "new_adapter",
    "NullAdapter",
    "STATSD_TEMPLATE",
    "StatsdAdapter",
]
