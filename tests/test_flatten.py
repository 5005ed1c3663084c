"""Tests for flattening raw Docker stats into samples."""

import pytest
from conftest import make_stats

from dockerstats.core.schemas import Container, MetricKind
from dockerstats.monitoring.flatten import MEMORY_STAT_FIELDS, flatten_stats


@pytest.fixture
def container() -> Container:
    return Container(id="c0ffee", name="web")


class TestFlattenStats:
    """Tests for flatten_stats."""

    def test_percpu_usage_in_index_order(self, container: Container) -> None:
        """Test that each core yields one sample named by its index."""
        samples = flatten_stats(container, make_stats(percpu=[10, 20, 30]))

        percpu = [s for s in samples if s.name.startswith("CPUStats.CPUUsage.PercpuUsage.")]
        assert [(s.name, s.value) for s in percpu] == [
            ("CPUStats.CPUUsage.PercpuUsage.0", 10),
            ("CPUStats.CPUUsage.PercpuUsage.1", 20),
            ("CPUStats.CPUUsage.PercpuUsage.2", 30),
        ]

    def test_network_summed_across_interfaces(self, container: Container) -> None:
        """Test that per-interface network counters are summed."""
        values = {s.name: s.value for s in flatten_stats(container, make_stats())}

        assert values["Network.RxBytes"] == 1024
        assert values["Network.RxPackets"] == 11
        assert values["Network.TxBytes"] == 512
        assert values["Network.TxPackets"] == 6
        assert values["Network.RxDropped"] == 0

    def test_legacy_network_object(self, container: Container) -> None:
        """Test the pre-1.21 single ``network`` object."""
        stats = {"network": {"rx_bytes": 42, "tx_errors": 1}}
        values = {s.name: s.value for s in flatten_stats(container, stats)}

        assert values["Network.RxBytes"] == 42
        assert values["Network.TxErrors"] == 1

    def test_memory_and_cpu_values(self, container: Container) -> None:
        """Test memory and CPU fields map to their dotted names."""
        values = {s.name: s.value for s in flatten_stats(container, make_stats())}

        assert values["MemoryStats.Usage"] == 100 * 1024 * 1024
        assert values["MemoryStats.MaxUsage"] == 200 * 1024 * 1024
        assert values["MemoryStats.Limit"] == 1024 * 1024 * 1024
        assert values["MemoryStats.Stats.Cache"] == 4096
        assert values["MemoryStats.Stats.TotalRss"] == 16384
        assert values["MemoryStats.Stats.Pgmajfault"] == 3
        assert values["MemoryStats.Stats.TotalPgmajfault"] == 0
        assert values["CPUStats.CPUUsage.TotalUsage"] == 1000000000
        assert values["CPUStats.CPUUsage.UsageInKernelmode"] == 400000000
        assert values["CPUStats.SystemCPUUsage"] == 10000000000
        assert values["CPUStats.ThrottlingData.ThrottledPeriods"] == 2

    def test_empty_record_yields_full_name_set(self, container: Container) -> None:
        """Test that missing fields read as zero and no per-CPU samples appear."""
        samples = flatten_stats(container, {})

        assert all(s.value == 0 for s in samples)
        assert not any("PercpuUsage" in s.name for s in samples)
        # 7 network + 4 memory + memory breakdown + 3 cpu usage + system + 3 throttling
        assert len(samples) == 7 + 4 + len(MEMORY_STAT_FIELDS) + 3 + 1 + 3

    def test_memory_breakdown_names(self) -> None:
        """Test the cgroup breakdown includes Total variants and the hierarchy limit."""
        names = [name for name, _ in MEMORY_STAT_FIELDS]

        assert "HierarchicalMemoryLimit" in names
        assert "TotalPgpgout" in names
        assert "TotalActiveFile" in names
        assert len(names) == len(set(names))

    def test_samples_are_gauges_for_container(self, container: Container) -> None:
        """Test every sample is tied to the container and has kind SAMPLE."""
        samples = flatten_stats(container, make_stats())

        assert all(s.container is container for s in samples)
        assert all(s.kind is MetricKind.SAMPLE for s in samples)

    def test_null_fields_read_as_zero(self, container: Container) -> None:
        """Test that explicit nulls (e.g. on cgroup v2 hosts) do not raise."""
        stats = {"memory_stats": {"usage": None, "stats": None}, "cpu_stats": {"cpu_usage": None}}
        values = {s.name: s.value for s in flatten_stats(container, stats)}

        assert values["MemoryStats.Usage"] == 0
        assert values["CPUStats.CPUUsage.TotalUsage"] == 0

    def test_malformed_record_raises(self, container: Container) -> None:
        """Test that a structurally wrong record raises instead of emitting garbage."""
        with pytest.raises((AttributeError, TypeError, ValueError)):
            flatten_stats(container, {"memory_stats": "garbage"})
