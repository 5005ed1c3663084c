"""Flatten a raw Docker stats record into dotted-name samples.

The names form a stable contract that sink templates may rely on:

- ``Network.*`` (summed across interfaces when the daemon reports them per
  interface)
- ``MemoryStats.*`` and the cgroup v1 breakdown under ``MemoryStats.Stats.*``
- ``CPUStats.*``, with one ``CPUStats.CPUUsage.PercpuUsage.<n>`` per core

Missing or null fields read as 0 so every record yields the same names
(except the per-CPU list, which follows whatever the daemon reports).
"""

from __future__ import annotations

from typing import Any

from dockerstats.core.schemas import Container, MetricKind, Sample

NETWORK_FIELDS: tuple[tuple[str, str], ...] = (
    ("RxBytes", "rx_bytes"),
    ("RxPackets", "rx_packets"),
    ("RxErrors", "rx_errors"),
    ("RxDropped", "rx_dropped"),
    ("TxBytes", "tx_bytes"),
    ("TxPackets", "tx_packets"),
    ("TxErrors", "tx_errors"),
)

MEMORY_FIELDS: tuple[tuple[str, str], ...] = (
    ("Usage", "usage"),
    ("MaxUsage", "max_usage"),
    ("Limit", "limit"),
    ("Failcnt", "failcnt"),
)

# cgroup counters that also have a hierarchical "total_" variant.
_CGROUP_MEMORY_FIELDS: tuple[tuple[str, str], ...] = (
    ("Cache", "cache"),
    ("Rss", "rss"),
    ("RssHuge", "rss_huge"),
    ("MappedFile", "mapped_file"),
    ("Pgfault", "pgfault"),
    ("Pgmajfault", "pgmajfault"),
    ("Pgpgin", "pgpgin"),
    ("Pgpgout", "pgpgout"),
    ("ActiveAnon", "active_anon"),
    ("InactiveAnon", "inactive_anon"),
    ("ActiveFile", "active_file"),
    ("InactiveFile", "inactive_file"),
    ("Unevictable", "unevictable"),
    ("Writeback", "writeback"),
)

MEMORY_STAT_FIELDS: tuple[tuple[str, str], ...] = (
    *_CGROUP_MEMORY_FIELDS,
    ("HierarchicalMemoryLimit", "hierarchical_memory_limit"),
    *((f"Total{name}", f"total_{key}") for name, key in _CGROUP_MEMORY_FIELDS),
)

CPU_USAGE_FIELDS: tuple[tuple[str, str], ...] = (
    ("TotalUsage", "total_usage"),
    ("UsageInUsermode", "usage_in_usermode"),
    ("UsageInKernelmode", "usage_in_kernelmode"),
)

THROTTLING_FIELDS: tuple[tuple[str, str], ...] = (
    ("Periods", "periods"),
    ("ThrottledPeriods", "throttled_periods"),
    ("ThrottledTime", "throttled_time"),
)


def _value(section: dict[str, Any] | None, key: str) -> int:
    if not section:
        return 0
    return int(section.get(key) or 0)


def _network_totals(stats: dict[str, Any]) -> dict[str, int]:
    """Return network counters, summing per-interface stats when present."""
    interfaces = stats.get("networks")
    if interfaces:
        totals: dict[str, int] = {}
        for iface in interfaces.values():
            for _, key in NETWORK_FIELDS:
                totals[key] = totals.get(key, 0) + _value(iface, key)
        return totals

    legacy = stats.get("network") or {}
    return {key: _value(legacy, key) for _, key in NETWORK_FIELDS}


def flatten_stats(container: Container, stats: dict[str, Any]) -> list[Sample]:
    """Translate one raw stats record into the full ordered list of samples.

    Args:
        container: The container the record belongs to
        stats: Decoded stats JSON as yielded by the Docker stats stream

    Returns:
        Samples of kind SAMPLE, in a stable order

    Raises:
        TypeError, ValueError, AttributeError: If the record is malformed
    """
    samples: list[Sample] = []

    def sample(name: str, value: int) -> None:
        samples.append(Sample(container, name, value, MetricKind.SAMPLE))

    # Network
    network = _network_totals(stats)
    for name, key in NETWORK_FIELDS:
        sample(f"Network.{name}", network[key])

    # MemoryStats
    memory = stats.get("memory_stats") or {}
    for name, key in MEMORY_FIELDS:
        sample(f"MemoryStats.{name}", _value(memory, key))

    memory_stat = memory.get("stats") or {}
    for name, key in MEMORY_STAT_FIELDS:
        sample(f"MemoryStats.Stats.{name}", _value(memory_stat, key))

    # CPUStats
    cpu = stats.get("cpu_stats") or {}
    cpu_usage = cpu.get("cpu_usage") or {}
    for name, key in CPU_USAGE_FIELDS:
        sample(f"CPUStats.CPUUsage.{name}", _value(cpu_usage, key))

    for i, v in enumerate(cpu_usage.get("percpu_usage") or []):
        sample(f"CPUStats.CPUUsage.PercpuUsage.{i}", int(v or 0))

    sample("CPUStats.SystemCPUUsage", _value(cpu, "system_cpu_usage"))

    throttling = cpu.get("throttling_data") or {}
    for name, key in THROTTLING_FIELDS:
        sample(f"CPUStats.ThrottlingData.{name}", _value(throttling, key))

    return samples
