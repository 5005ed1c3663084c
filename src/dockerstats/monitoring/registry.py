"""Container registry - the shared source of truth for known containers.

Maps a container ID to its resolved metadata and to the attachment currently
streaming its metrics. A single lock guards both, so registration is
idempotent and at most one live attachment exists per container.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dockerstats.core.schemas import Container

if TYPE_CHECKING:
    from dockerstats.monitoring.attachment import MetricStreamAttachment
    from dockerstats.monitoring.runtime import RuntimeClient

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """Strip a single leading path separator (Docker reports ``/web``)."""
    return name[1:] if name.startswith("/") else name


@dataclass
class _Entry:
    container: Container
    attachment: MetricStreamAttachment | None = None


class ContainerRegistry:
    """Lock-protected map from container ID to Container and live attachment.

    The lock is held across the inspection call in ``get_or_register`` (so a
    container is inspected once however many threads ask for it), and never
    across stats streaming or sink calls.
    """

    def __init__(self, runtime: RuntimeClient) -> None:
        self._runtime = runtime
        self._lock = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def get_or_register(self, container_id: str) -> tuple[Container, bool]:
        """Return the container for an ID, inspecting and storing it if new.

        Args:
            container_id: Runtime-assigned container ID

        Returns:
            Tuple of (container, is_new)

        Raises:
            InspectionError: If the runtime cannot resolve the ID
        """
        with self._lock:
            entry = self._entries.get(container_id)
            if entry is not None:
                return entry.container, False

            container = self._runtime.inspect_container(container_id)
            name = normalize_name(container.name)
            if name != container.name:
                container = container.model_copy(update={"name": name})
            self._entries[container_id] = _Entry(container)

        logger.debug(f"Registered container {container.name} ({container.short_id})")
        return container, True

    def get(self, container_id: str) -> Container | None:
        with self._lock:
            entry = self._entries.get(container_id)
            return entry.container if entry is not None else None

    def attach(
        self,
        container_id: str,
        factory: Callable[[Container], MetricStreamAttachment],
    ) -> MetricStreamAttachment | None:
        """Create an attachment for a registered container unless one is live.

        The check and the slot assignment happen under one lock acquisition,
        so concurrent duplicate start events cannot spawn two attachments.
        The caller starts the returned attachment.

        Returns:
            The new attachment, or None if the container is unknown or
            already attached
        """
        with self._lock:
            entry = self._entries.get(container_id)
            if entry is None or entry.attachment is not None:
                return None
            entry.attachment = factory(entry.container)
            return entry.attachment

    def detach(
        self,
        container_id: str,
        attachment: MetricStreamAttachment | None = None,
    ) -> MetricStreamAttachment | None:
        """Clear a container's attachment slot.

        Args:
            container_id: Container to detach
            attachment: If given, only clear the slot when it still holds
                this attachment (a finished attachment must not clear its
                successor)

        Returns:
            The attachment that was removed, if any
        """
        with self._lock:
            entry = self._entries.get(container_id)
            if entry is None or entry.attachment is None:
                return None
            if attachment is not None and entry.attachment is not attachment:
                return None
            removed, entry.attachment = entry.attachment, None
            return removed

    def evict(self, container_id: str) -> MetricStreamAttachment | None:
        """Forget a container entirely.

        Returns:
            The container's live attachment, which the caller should stop
        """
        with self._lock:
            entry = self._entries.pop(container_id, None)

        if entry is None:
            return None
        logger.debug(f"Evicted container {entry.container.name} ({entry.container.short_id})")
        return entry.attachment

    def attachments(self) -> list[MetricStreamAttachment]:
        """Snapshot of all live attachments."""
        with self._lock:
            return [e.attachment for e in self._entries.values() if e.attachment is not None]

    def __contains__(self, container_id: object) -> bool:
        with self._lock:
            return container_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
