"""LogAdapter - writes each metric as a rendered line (l2met by default)."""

from __future__ import annotations

import sys
import threading
from typing import TextIO

from dockerstats.adapters.base import Adapter
from dockerstats.adapters.templates import L2MET_TEMPLATE, MetricTemplate
from dockerstats.core.errors import SinkError
from dockerstats.core.schemas import Container, MetricKind


class LogAdapter(Adapter):
    """Drains metrics to a text stream, one line per metric.

    Example:
        ```python
        adapter = LogAdapter()  # l2met lines on stdout
        adapter.sample(container, "MemoryStats.Usage", 1024)
        # sample#MemoryStats.Usage=1024 source=web.host1
        ```
    """

    def __init__(
        self,
        template: str | None = None,
        stream: TextIO | None = None,
        hostname: str | None = None,
    ) -> None:
        self._template = MetricTemplate(template or L2MET_TEMPLATE, hostname=hostname)
        self._stream = stream if stream is not None else sys.stdout
        self._lock = threading.Lock()

    def sample(self, container: Container, name: str, value: int) -> None:
        self._write(container, MetricKind.SAMPLE, name, value)

    def incr(self, container: Container, name: str, value: int) -> None:
        self._write(container, MetricKind.COUNT, name, value)

    def _write(self, container: Container, kind: MetricKind, name: str, value: int) -> None:
        line = self._template.render(container, name, value, type=kind.value)
        # Whole lines only; interleaved writes from attachment threads would garble them.
        with self._lock:
            try:
                self._stream.write(line + "\n")
                self._stream.flush()
            except OSError as e:
                raise SinkError(f"log write failed: {e}") from e
