"""Jinja2 metric-name templates shared by the concrete adapters."""

from __future__ import annotations

import socket
from typing import Any

from jinja2 import Environment, StrictUndefined, Template, TemplateError

from dockerstats.core.errors import ConfigError
from dockerstats.core.schemas import Container

# Renders metrics as l2met samples, e.g. ``sample#MemoryStats.Usage=1024 source=web.host1``
L2MET_TEMPLATE = "{{ type }}#{{ name }}={{ value }} source={{ container.name }}.{{ hostname }}"

# Renders the statsd metric name.
STATSD_TEMPLATE = "{{ name }}.source__{{ container.name }}.{{ hostname }}__"

_env = Environment(undefined=StrictUndefined, autoescape=False, keep_trailing_newline=False)


class MetricTemplate:
    """A compiled metric template.

    Template context:
        type: "sample" or "count" (empty when only a name is rendered)
        name: Dotted metric name
        value: Metric value (None when only a name is rendered)
        container: The Container (``.id``, ``.name``, ``.env``)
        hostname: Host the collector runs on
        env(key): Value of ``key`` in the container's environment
    """

    def __init__(self, source: str, hostname: str | None = None) -> None:
        try:
            self._template: Template = _env.from_string(source)
        except TemplateError as e:
            raise ConfigError(f"Invalid metric template {source!r}: {e}") from e
        self.source = source
        self.hostname = hostname if hostname is not None else socket.gethostname()

    def render(
        self,
        container: Container,
        name: str,
        value: int | None = None,
        type: str = "",
    ) -> str:
        context: dict[str, Any] = {
            "type": type,
            "name": name,
            "value": value,
            "container": container,
            "hostname": self.hostname,
            "env": container.getenv,
        }
        return self._template.render(context)

    def __repr__(self) -> str:
        return f"MetricTemplate({self.source!r})"
