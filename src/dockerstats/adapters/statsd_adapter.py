"""StatsdAdapter - sends samples as gauges and events as counters to StatsD."""

from __future__ import annotations

from typing import Protocol

from dockerstats.adapters.base import Adapter
from dockerstats.adapters.templates import STATSD_TEMPLATE, MetricTemplate
from dockerstats.core.constants import MAX_INT64
from dockerstats.core.errors import SinkError
from dockerstats.core.schemas import Container


class StatsdClient(Protocol):
    """The subset of ``datadog.dogstatsd.DogStatsd`` the adapter uses."""

    def increment(self, metric: str, value: int = 1) -> None: ...

    def gauge(self, metric: str, value: int) -> None: ...


class StatsdAdapter(Adapter):
    """Adapter that renders a metric name per call and ships it over StatsD.

    Values that do not fit a signed 64-bit integer are dropped.
    """

    def __init__(
        self,
        client: StatsdClient,
        template: str | None = None,
        hostname: str | None = None,
    ) -> None:
        self._client = client
        self._template = MetricTemplate(template or STATSD_TEMPLATE, hostname=hostname)

    def incr(self, container: Container, name: str, value: int) -> None:
        if value > MAX_INT64:
            return
        try:
            self._client.increment(self._name(container, name), value)
        except OSError as e:
            raise SinkError(f"statsd increment {name} failed: {e}") from e

    def sample(self, container: Container, name: str, value: int) -> None:
        if value > MAX_INT64:
            return
        try:
            self._client.gauge(self._name(container, name), value)
        except OSError as e:
            raise SinkError(f"statsd gauge {name} failed: {e}") from e

    def _name(self, container: Container, name: str) -> str:
        return self._template.render(container, name)
