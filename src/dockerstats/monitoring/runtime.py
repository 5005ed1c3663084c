"""Container runtime client contract and its Docker implementation.

The collector only talks to the runtime through ``RuntimeClient`` so tests
can drive it with an in-memory fake instead of a Docker daemon.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from datetime import datetime
from typing import Any

import docker
import requests
from docker.errors import DockerException, NotFound

from dockerstats.core.errors import (
    InspectionError,
    StartupError,
    StreamOpenError,
    SubscriptionError,
)
from dockerstats.core.schemas import Container, RuntimeEvent

logger = logging.getLogger(__name__)

# Connection-level failures surface as requests exceptions, not DockerException.
_RUNTIME_ERRORS = (DockerException, requests.exceptions.RequestException)


class RuntimeClient(ABC):
    """Abstract container runtime.

    Implementations:
    - DockerRuntimeClient: Docker Engine API via the docker SDK
    """

    @abstractmethod
    def list_running_containers(self) -> list[str]:
        """Return the IDs of all running containers.

        Raises:
            StartupError: If the runtime cannot be queried
        """
        pass

    @abstractmethod
    def inspect_container(self, container_id: str) -> Container:
        """Resolve a container's metadata.

        The returned Container carries ``container_id`` as its ID and the
        runtime's raw name (the registry normalizes it).

        Raises:
            InspectionError: If the container cannot be resolved
        """
        pass

    @abstractmethod
    def subscribe_events(self) -> Iterable[RuntimeEvent]:
        """Open the lifecycle event feed. It never ends in normal operation.

        If the returned object has a ``close()`` method, the collector calls
        it on shutdown to unblock the event loop.

        Raises:
            SubscriptionError: If the subscription cannot be established
        """
        pass

    @abstractmethod
    def open_stats_stream(self, container_id: str) -> Iterable[dict[str, Any]]:
        """Open a continuous stats feed for one container.

        The feed ends when the container stops or is removed.

        Raises:
            StreamOpenError: If the feed cannot be opened
        """
        pass


def parse_event(raw: dict[str, Any]) -> RuntimeEvent | None:
    """Normalize a decoded Docker event into a RuntimeEvent.

    Handles both the legacy (``status``/``id``/``time``) and the current
    (``Action``/``Actor``/``timeNano``) event formats. Exec actions carry
    their command after a colon (``exec_start: sh -c ...``), which is dropped.

    Returns:
        The event, or None if it does not reference a container
    """
    if raw.get("Type", "container") != "container":
        return None

    status = raw.get("status") or raw.get("Action") or ""
    status = status.split(":", 1)[0].strip().lower()

    container_id = raw.get("id") or (raw.get("Actor") or {}).get("ID")
    if not container_id or not status:
        return None

    if raw.get("timeNano"):
        timestamp = datetime.fromtimestamp(raw["timeNano"] / 1e9)
    elif raw.get("time"):
        timestamp = datetime.fromtimestamp(raw["time"])
    else:
        timestamp = datetime.now()

    return RuntimeEvent(container_id=container_id, status=status, timestamp=timestamp)


class _EventStream:
    """Iterates normalized events over a closable Docker event stream."""

    def __init__(self, raw_stream: Any) -> None:
        self._raw = raw_stream

    def __iter__(self) -> Iterator[RuntimeEvent]:
        for raw in self._raw:
            event = parse_event(raw)
            if event is None:
                logger.debug(f"Ignoring event without container: {raw!r}")
                continue
            yield event

    def close(self) -> None:
        self._raw.close()


class DockerRuntimeClient(RuntimeClient):
    """RuntimeClient backed by the Docker Engine API.

    Example:
        ```python
        runtime = DockerRuntimeClient()  # docker.from_env()
        for event in runtime.subscribe_events():
            print(event.status, event.container_id)
        ```
    """

    def __init__(self, client: docker.DockerClient | None = None) -> None:
        """Initialize the runtime client.

        Args:
            client: Docker client to use; defaults to ``docker.from_env()``

        Raises:
            StartupError: If no client was given and the daemon is unreachable
        """
        if client is None:
            try:
                client = docker.from_env()
            except DockerException as e:
                raise StartupError(f"cannot connect to Docker: {e}") from e
        self._client = client

    def list_running_containers(self) -> list[str]:
        try:
            containers = self._client.containers.list(sparse=True)
        except _RUNTIME_ERRORS as e:
            raise StartupError(f"cannot list containers: {e}") from e
        return [c.id for c in containers]

    def inspect_container(self, container_id: str) -> Container:
        try:
            attrs = self._client.containers.get(container_id).attrs
        except NotFound as e:
            raise InspectionError(container_id, "no such container") from e
        except _RUNTIME_ERRORS as e:
            raise InspectionError(container_id, str(e)) from e

        config = attrs.get("Config") or {}
        return Container(
            id=container_id,
            name=attrs.get("Name", ""),
            env=tuple(config.get("Env") or ()),
        )

    def subscribe_events(self) -> Iterable[RuntimeEvent]:
        try:
            raw_stream = self._client.events(decode=True, filters={"type": "container"})
        except _RUNTIME_ERRORS as e:
            raise SubscriptionError(f"cannot subscribe to events: {e}") from e
        return _EventStream(raw_stream)

    def open_stats_stream(self, container_id: str) -> Iterable[dict[str, Any]]:
        try:
            return self._client.api.stats(container_id, stream=True, decode=True)
        except _RUNTIME_ERRORS as e:
            raise StreamOpenError(container_id, str(e)) from e
