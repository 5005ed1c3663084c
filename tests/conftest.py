"""Shared fakes for collector tests: an in-memory runtime and a recording adapter."""

from __future__ import annotations

import queue
import threading
import time
from collections.abc import Iterable, Iterator
from typing import Any

import pytest

from dockerstats.adapters.base import Adapter
from dockerstats.core.errors import (
    InspectionError,
    StartupError,
    StreamOpenError,
    SubscriptionError,
)
from dockerstats.core.schemas import Container, RuntimeEvent
from dockerstats.monitoring.runtime import RuntimeClient


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEventStream:
    """Closable event feed. Ends after the queued events unless kept open."""

    _CLOSED = object()

    def __init__(self, events: Iterable[RuntimeEvent] = (), keep_open: bool = False) -> None:
        self._queue: queue.Queue[Any] = queue.Queue()
        for event in events:
            self._queue.put(event)
        if not keep_open:
            self._queue.put(self._CLOSED)
        self.closed = False

    def push(self, event: RuntimeEvent) -> None:
        self._queue.put(event)

    def __iter__(self) -> Iterator[RuntimeEvent]:
        while True:
            item = self._queue.get()
            if item is self._CLOSED:
                return
            yield item

    def close(self) -> None:
        self.closed = True
        self._queue.put(self._CLOSED)


class FakeRuntime(RuntimeClient):
    """In-memory RuntimeClient.

    Attributes:
        containers: Inspectable containers by ID (names as the runtime reports them)
        running: IDs returned by list_running_containers
        stats: Raw stats records (or an iterable factory) per container ID
    """

    def __init__(
        self,
        containers: Iterable[Container] = (),
        running: Iterable[str] = (),
        events: Iterable[RuntimeEvent] = (),
        keep_events_open: bool = False,
    ) -> None:
        self.containers = {c.id: c for c in containers}
        self.running = list(running)
        self.event_stream = FakeEventStream(events, keep_open=keep_events_open)
        self.stats: dict[str, Any] = {}
        self.inspect_calls: list[str] = []
        self.opened: list[str] = []
        self.inspect_delay = 0.0
        self.list_error = False
        self.subscribe_error = False
        self.stream_errors: set[str] = set()
        self._lock = threading.Lock()

    def list_running_containers(self) -> list[str]:
        if self.list_error:
            raise StartupError("cannot list containers: daemon unreachable")
        return list(self.running)

    def inspect_container(self, container_id: str) -> Container:
        with self._lock:
            self.inspect_calls.append(container_id)
        if self.inspect_delay:
            time.sleep(self.inspect_delay)
        if container_id not in self.containers:
            raise InspectionError(container_id, "no such container")
        return self.containers[container_id]

    def subscribe_events(self) -> FakeEventStream:
        if self.subscribe_error:
            raise SubscriptionError("cannot subscribe to events")
        return self.event_stream

    def open_stats_stream(self, container_id: str) -> Iterable[dict[str, Any]]:
        with self._lock:
            self.opened.append(container_id)
        if container_id in self.stream_errors:
            raise StreamOpenError(container_id, "no such container")
        records = self.stats.get(container_id, [])
        return records() if callable(records) else iter(records)


class RecordingAdapter(Adapter):
    """Adapter that records every call as (kind, container name, metric, value)."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str, int]] = []
        self._lock = threading.Lock()

    def sample(self, container: Container, name: str, value: int) -> None:
        with self._lock:
            self.calls.append(("sample", container.name, name, value))

    def incr(self, container: Container, name: str, value: int) -> None:
        with self._lock:
            self.calls.append(("count", container.name, name, value))

    def for_container(self, name: str) -> list[tuple[str, str, str, int]]:
        with self._lock:
            return [c for c in self.calls if c[1] == name]

    def counts(self) -> list[tuple[str, str, str, int]]:
        with self._lock:
            return [c for c in self.calls if c[0] == "count"]


def make_stats(percpu: list[int] | None = None, memory_usage: int = 100 * 1024 * 1024) -> dict:
    """Create a mock Docker stats response."""
    return {
        "networks": {
            "eth0": {"rx_bytes": 1000, "rx_packets": 10, "tx_bytes": 500, "tx_packets": 5},
            "eth1": {"rx_bytes": 24, "rx_packets": 1, "tx_bytes": 12, "tx_packets": 1},
        },
        "memory_stats": {
            "usage": memory_usage,
            "max_usage": memory_usage * 2,
            "limit": 1024 * 1024 * 1024,
            "failcnt": 0,
            "stats": {"cache": 4096, "rss": 8192, "total_rss": 16384, "pgmajfault": 3},
        },
        "cpu_stats": {
            "cpu_usage": {
                "total_usage": 1000000000,
                "usage_in_usermode": 600000000,
                "usage_in_kernelmode": 400000000,
                "percpu_usage": percpu if percpu is not None else [500000000, 500000000],
            },
            "system_cpu_usage": 10000000000,
            "throttling_data": {"periods": 7, "throttled_periods": 2, "throttled_time": 900},
        },
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def web() -> Container:
    return Container(id="a1b2c3d4e5f6a7b8", name="/web", env=("SOURCE=web.prod", "PORT=80"))
