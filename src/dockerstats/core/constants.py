"""Shared constants for dockerstats.

Centralized constants to avoid duplication and ensure consistency across modules.
"""

from __future__ import annotations

# Default sampling resolution in seconds. A configured resolution of 0 (or
# unset) falls back to this value.
DEFAULT_RESOLUTION = 10

# Lifecycle statuses that are handled by the collector.
# See https://docs.docker.com/engine/reference/commandline/events/
DEFAULT_EVENT_WHITELIST = frozenset(
    {
        "create",
        "destroy",
        "die",
        "exec_create",
        "exec_start",
        "export",
        "kill",
        "oom",
        "pause",
        "restart",
        "start",
        "stop",
        "unpause",
    }
)

# Statuses that cause a metric stream to be attached.
ATTACH_STATUSES = frozenset({"start", "restart"})

# Statuses that end the current metric stream.
DETACH_STATUSES = frozenset({"die"})

# Statuses that remove the container from the registry altogether.
EVICT_STATUSES = frozenset({"destroy"})

# StatsD clients take signed 64-bit integers.
MAX_INT64 = 2**63 - 1

DEFAULT_URL = "log://"
DEFAULT_STATSD_PORT = 8125

# Seconds to wait for each attachment thread during shutdown.
SHUTDOWN_JOIN_TIMEOUT = 2.0
