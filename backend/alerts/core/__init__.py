"""Core modules for the alerts service."""

from .config import (
    ALERTS_DIR,
    BACKEND_DIR,
    DEFAULT_DENIED_EVENT_TYPES,
    DEFAULT_SYNC_EVENT_NAMES,
    AlertSettings,
    get_settings,
)
from .config_reader import ConfigLoadError, DynamicConfig, YamlConfig
from .logging import setup_logging
from .scheduler import ThreadPoolScheduler
from .triggers import TriggerClassifier, validate_event_name

__all__ = [
    # Settings
    "AlertSettings",
    "get_settings",
    "DEFAULT_DENIED_EVENT_TYPES",
    "DEFAULT_SYNC_EVENT_NAMES",
    # Path Constants
    "ALERTS_DIR",
    "BACKEND_DIR",
    # Rule configuration
    "ConfigLoadError",
    "DynamicConfig",
    "YamlConfig",
    # Setup functions
    "setup_logging",
    # Services
    "ThreadPoolScheduler",
    "TriggerClassifier",
    "validate_event_name",
]
