"""Alert rule model."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from .message_format import MessageFormat


@dataclass(frozen=True)
class AlertRule:
    """One configured alert, immutable once parsed.

    ``triggers`` holds classified trigger ids only; raw event triggers that
    failed classification are kept in ``raw_triggers`` for diagnostics.
    """

    index: int
    raw_triggers: tuple[str, ...]
    triggers: frozenset[str]
    targets: tuple[str, ...] = ()
    async_: bool = True
    ignore_cancelled: bool = True
    conditions: tuple[str, ...] = ()
    format: MessageFormat | None = None
    definition: Mapping = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class ReloadResult:
    count: int
    active_triggers: frozenset[str]
