"""Shared data models for the alerts service."""

from .alert_rule import AlertRule, ReloadResult
from .message_format import BLANK_FIELD_TEXT, EmbedField, MessageFormat, Translator

__all__ = [
    "AlertRule",
    "BLANK_FIELD_TEXT",
    "EmbedField",
    "MessageFormat",
    "ReloadResult",
    "Translator",
]
