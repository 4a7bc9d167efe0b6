"""Dotted-path access to the alert rule configuration.

Paths look like ``Alerts.0.Embed.Title.Text``: segments index into mappings
by key and into lists by integer position.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


class ConfigLoadError(Exception):
    """Exception raised when configuration loading fails."""


class DynamicConfig:
    """Read-only view over a nested mapping loaded from configuration."""

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: Mapping[str, Any] = data or {}

    @property
    def data(self) -> Mapping[str, Any]:
        return self._data

    def get_optional(self, path: str) -> Any | None:
        node: Any = self._data
        for segment in path.split("."):
            if isinstance(node, Mapping):
                if segment not in node:
                    return None
                node = node[segment]
            elif isinstance(node, list):
                if not segment.isdigit() or int(segment) >= len(node):
                    return None
                node = node[int(segment)]
            else:
                return None
        return node

    def get_optional_str(self, path: str) -> str | None:
        value = self.get_optional(path)
        if value is None or isinstance(value, (Mapping, list)):
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def get_optional_bool(self, path: str) -> bool | None:
        value = self.get_optional(path)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        return None

    def get_optional_int(self, path: str) -> int | None:
        value = self.get_optional(path)
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                return None
        return None

    def get_optional_str_list(self, path: str) -> list[str] | None:
        value = self.get_optional(path)
        if value is None:
            return None
        if isinstance(value, list):
            return [str(item) for item in value if item is not None]
        if isinstance(value, Mapping):
            return None
        return [str(value)]


class YamlConfig(DynamicConfig):
    """DynamicConfig backed by a YAML file, re-read on :meth:`reload`."""

    def __init__(self, path: str | Path) -> None:
        super().__init__({})
        self.path = Path(path)
        self._lock = threading.Lock()

    def reload(self) -> None:
        """Re-read the file. Raises ConfigLoadError and keeps the old data on failure."""
        if not self.path.exists():
            raise ConfigLoadError(f"Config file not found: {self.path}")

        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"Failed to parse YAML config: {e}") from e
        except OSError as e:
            raise ConfigLoadError(f"Failed to read config file: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ConfigLoadError("Config file must contain a YAML mapping")

        with self._lock:
            self._data = data
        logger.debug(f"Loaded configuration from {self.path}")
