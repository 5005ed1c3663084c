"""Event watcher - the collector's long-running control loop.

This module is the heart of dockerstats, coordinating:
- Bootstrap from containers that are already running
- Lifecycle event filtering and registry updates
- Lifecycle notifications to the adapter
- Starting and stopping per-container metric stream attachments

Per-container problems (inspection failures, stream errors, adapter faults)
are logged and skipped. Only startup failures and an ended event feed are
fatal.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from dockerstats.adapters.base import Adapter, NullAdapter
from dockerstats.core.constants import (
    ATTACH_STATUSES,
    DEFAULT_EVENT_WHITELIST,
    DETACH_STATUSES,
    EVICT_STATUSES,
    SHUTDOWN_JOIN_TIMEOUT,
)
from dockerstats.core.errors import InspectionError, SinkError, StartupError, UnexpectedStop
from dockerstats.core.schemas import Container, Event, MetricKind, RuntimeEvent, Sample
from dockerstats.monitoring.attachment import MetricStreamAttachment
from dockerstats.monitoring.registry import ContainerRegistry

if TYPE_CHECKING:
    from dockerstats.monitoring.runtime import RuntimeClient

logger = logging.getLogger(__name__)


class StatsCollector:
    """Watches container lifecycle events and drains metrics to an adapter.

    Example:
        ```python
        collector = StatsCollector(DockerRuntimeClient(), adapter=LogAdapter())
        try:
            collector.run()  # blocks
        finally:
            collector.stop()
        ```
    """

    def __init__(
        self,
        runtime: RuntimeClient,
        adapter: Adapter | None = None,
        resolution: int | None = None,
        whitelist: Iterable[str] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the collector.

        Args:
            runtime: Container runtime client
            adapter: Sink for samples and events; None discards everything
            resolution: Per-container sampling period in seconds (0/None = default)
            whitelist: Event statuses to handle; None or empty uses the default set
            clock: Time source handed to each attachment's sampling gate
        """
        self.runtime = runtime
        self.adapter = adapter if adapter is not None else NullAdapter()
        self.resolution = resolution
        self.whitelist = frozenset(whitelist) if whitelist else DEFAULT_EVENT_WHITELIST
        self.registry = ContainerRegistry(runtime)
        self._clock = clock
        self._stopping = threading.Event()
        self._events: Iterable[RuntimeEvent] | None = None

    def run(self) -> None:
        """Drain metrics from running containers and follow lifecycle events.

        Blocks until ``stop()`` is called.

        Raises:
            StartupError: If containers cannot be listed
            SubscriptionError: If the event feed cannot be subscribed to
            UnexpectedStop: If the event feed ends while still running
        """
        # Subscribe before listing so containers started in between are not missed.
        self._events = self.runtime.subscribe_events()

        try:
            container_ids = self.runtime.list_running_containers()
        except StartupError:
            self._close_events()
            raise

        logger.info(f"Watching {len(container_ids)} running containers")
        for container_id in container_ids:
            try:
                container, _ = self.registry.get_or_register(container_id)
            except InspectionError as e:
                logger.warning(f"Skipping container: {e}")
                continue
            self._attach(container)

        events = iter(self._events)
        while True:
            try:
                event = next(events)
            except StopIteration:
                break
            except Exception as e:
                if self._stopping.is_set():
                    logger.debug(f"Event stream closed during shutdown: {e}")
                    return
                raise UnexpectedStop(f"event stream failed: {e}") from e

            if self._stopping.is_set():
                break
            try:
                self.handle_event(event)
            except Exception:
                logger.exception(
                    f"Error handling {event.status} event for {event.container_id[:12]}"
                )

        if not self._stopping.is_set():
            raise UnexpectedStop("unexpected stop")

    def handle_event(self, event: RuntimeEvent) -> None:
        """Process one lifecycle event.

        Filters by whitelist, registers the container, notifies the adapter
        and starts or stops the container's attachment.
        """
        if event.status not in self.whitelist:
            return

        try:
            container, _ = self.registry.get_or_register(event.container_id)
        except InspectionError as e:
            logger.debug(f"Dropping {event.status} event: {e}")
            return

        self._notify(Event(container, event.status, event.timestamp))

        if event.status in ATTACH_STATUSES:
            self._attach(container)
        elif event.status in DETACH_STATUSES:
            attachment = self.registry.detach(container.id)
            if attachment is not None:
                attachment.stop()
        elif event.status in EVICT_STATUSES:
            attachment = self.registry.evict(event.container_id)
            if attachment is not None:
                attachment.stop()

    def stop(self, timeout: float = SHUTDOWN_JOIN_TIMEOUT) -> None:
        """Stop the event loop and all attachments, waiting for them to finish.

        Args:
            timeout: Seconds to wait for each attachment thread
        """
        if self._stopping.is_set():
            return
        self._stopping.set()
        self._close_events()

        attachments = self.registry.attachments()
        for attachment in attachments:
            attachment.stop()

        for attachment in attachments:
            if not attachment.join(timeout=timeout):
                logger.warning(f"Attachment for {attachment.container.name} did not stop in time")

        logger.info(f"Stopped {len(attachments)} attachments")

    def _attach(self, container: Container) -> MetricStreamAttachment | None:
        """Start an attachment for the container unless it already has one."""
        if self._stopping.is_set():
            return None
        attachment = self.registry.attach(container.id, self._new_attachment)
        if attachment is None:
            logger.debug(f"Already draining {container.name}")
            return None

        # stop() may have taken its snapshot before the slot was filled.
        if self._stopping.is_set():
            self.registry.detach(container.id, attachment)
            attachment.stop()
            return None
        attachment.start()
        return attachment

    def _new_attachment(self, container: Container) -> MetricStreamAttachment:
        return MetricStreamAttachment(
            container,
            self.runtime,
            self.adapter,
            resolution=self.resolution,
            on_exit=self._on_attachment_exit,
            clock=self._clock,
        )

    def _on_attachment_exit(self, attachment: MetricStreamAttachment) -> None:
        self.registry.detach(attachment.container.id, attachment)

    def _notify(self, event: Event) -> None:
        sample = Sample(event.container, event.metric_name, 1, MetricKind.COUNT)
        try:
            self.adapter.send(sample)
        except SinkError as e:
            logger.warning(f"Sink failed on {sample.name} for {event.container.name}: {e}")
        except Exception:
            logger.exception(f"Adapter error on {sample.name} for {event.container.name}")

    def _close_events(self) -> None:
        close = getattr(self._events, "close", None)
        if close is None:
            return
        try:
            close()
        except Exception as e:
            logger.debug(f"Error closing event stream: {e}")
