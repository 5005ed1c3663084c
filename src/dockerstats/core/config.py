"""Configuration loading utilities.

Supports YAML and JSON configuration files with schema validation.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from dockerstats.core.errors import ConfigError
from dockerstats.core.schemas import CollectorConfig


def load_config(path: Path | str | None = None, **overrides: Any) -> CollectorConfig:
    """Load and validate a collector configuration.

    Args:
        path: Optional path to a YAML or JSON configuration file
        **overrides: Values that take precedence over the file (None is ignored)

    Returns:
        Validated CollectorConfig object

    Raises:
        ConfigError: If the file is missing, has an unsupported format, or
            fails validation
    """
    data: dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()
        with open(path, encoding="utf-8") as f:
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file must contain a mapping: {path}")

    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return CollectorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(str(e)) from e
