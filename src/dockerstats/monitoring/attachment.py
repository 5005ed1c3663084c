"""Per-container metric stream attachment.

Each attachment runs in its own daemon thread: it pulls raw stats off the
runtime's stats feed, drops whatever arrives between sampling-gate ticks, and
forwards the flattened samples of accepted records to the adapter.

A fault while translating or forwarding a record ends this attachment only;
nothing propagates to the collector or to other attachments.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from dockerstats.core.errors import AttachmentFault, SinkError, StreamOpenError
from dockerstats.monitoring.flatten import flatten_stats
from dockerstats.monitoring.ticker import SamplingGate

if TYPE_CHECKING:
    from dockerstats.adapters.base import Adapter
    from dockerstats.core.schemas import Container
    from dockerstats.monitoring.runtime import RuntimeClient

logger = logging.getLogger(__name__)


class MetricStreamAttachment:
    """Streams, throttles and forwards one container's stats.

    Example:
        ```python
        attachment = MetricStreamAttachment(container, runtime, adapter, resolution=10)
        attachment.start()
        # ...
        attachment.stop()
        attachment.join(timeout=2.0)
        ```
    """

    def __init__(
        self,
        container: Container,
        runtime: RuntimeClient,
        adapter: Adapter,
        resolution: int | None = None,
        on_exit: Callable[[MetricStreamAttachment], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the attachment.

        Args:
            container: Container whose stats are streamed
            runtime: Runtime client used to open the stats feed
            adapter: Sink that receives accepted samples
            resolution: Sampling gate period in seconds (0/None = default)
            on_exit: Called with this attachment once its loop has ended
            clock: Time source for the sampling gate
        """
        self.container = container
        self._runtime = runtime
        self._adapter = adapter
        self._resolution = resolution
        self._on_exit = on_exit
        self._clock = clock
        self._stop = threading.Event()
        self._start_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._running = False
        self.records_forwarded = 0
        self.records_dropped = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def stopped(self) -> bool:
        """True once ``stop()`` was requested."""
        return self._stop.is_set()

    def start(self) -> None:
        """Start the background streaming thread.

        Does nothing once ``stop()`` has been called, so an attachment stopped
        before it started never opens a stats stream.
        """
        with self._start_lock:
            if self._stop.is_set():
                logger.debug(f"Attachment for {self.container.name} stopped before start")
                return
            if self._thread is not None:
                logger.warning(f"Attachment for {self.container.name} already started")
                return

            self._running = True
            self._thread = threading.Thread(
                target=self.run,
                name=f"attach-{self.container.short_id}",
                daemon=True,
            )
            self._thread.start()

    def stop(self) -> None:
        """Ask the attachment to stop. It forwards nothing after this call."""
        with self._start_lock:
            self._stop.set()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the streaming thread to end.

        Returns:
            True if the thread has finished (or was never started)
        """
        if self._thread is None:
            return True
        self._thread.join(timeout=timeout)
        return not self._thread.is_alive()

    def run(self) -> None:
        """Stream until the feed closes, a fault occurs, or ``stop()`` is called.

        Runs in the attachment thread; tests may call it directly.
        """
        self._running = True
        try:
            self._stream()
        finally:
            self._running = False
            if self._on_exit is not None:
                self._on_exit(self)

    def _stream(self) -> None:
        name = self.container.name
        logger.debug(f"Draining {name} ({self.container.short_id})")

        try:
            stream = self._runtime.open_stats_stream(self.container.id)
        except StreamOpenError as e:
            logger.warning(f"Not watching {name}: {e}")
            return

        gate = SamplingGate(self._resolution, clock=self._clock)

        try:
            for stats in stream:
                if self._stop.is_set():
                    break
                if not gate.check():
                    self.records_dropped += 1
                    continue
                if self._forward(stats):
                    self.records_forwarded += 1
        except AttachmentFault as e:
            logger.error(f"Stopped watching {name}: {e}", exc_info=e.__cause__)
            return
        except Exception as e:
            # Container may have stopped or been removed - this is expected
            if "404" in str(e) or "not running" in str(e).lower():
                logger.debug(f"Stats stream for {name} closed: {e}")
            else:
                logger.warning(f"Error in stats stream for {name}: {e}")
            return

        logger.debug(
            f"Stopped draining {name}: forwarded={self.records_forwarded} "
            f"dropped={self.records_dropped}"
        )

    def _forward(self, stats: dict[str, Any]) -> bool:
        """Flatten one record and send every sample to the adapter.

        Returns:
            False if ``stop()`` interrupted the record before all samples were sent

        Raises:
            AttachmentFault: On any failure other than a SinkError
        """
        try:
            samples = flatten_stats(self.container, stats)
        except Exception as e:
            raise AttachmentFault(f"cannot translate stats record: {e}") from e

        failures = 0
        last_error: SinkError | None = None
        for sample in samples:
            if self._stop.is_set():
                return False
            try:
                self._adapter.send(sample)
            except SinkError as e:
                failures += 1
                last_error = e
            except Exception as e:
                raise AttachmentFault(f"adapter failed on {sample.name}: {e}") from e

        if failures:
            logger.warning(
                f"Sink dropped {failures}/{len(samples)} samples for "
                f"{self.container.name}: {last_error}"
            )
        return True

    def __repr__(self) -> str:
        state = "running" if self._running else "stopped"
        return f"MetricStreamAttachment({self.container.name!r}, {state})"
