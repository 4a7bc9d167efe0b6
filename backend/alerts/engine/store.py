"""Alert rule store: parsed rules plus the active trigger index."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from alerts.core.config_reader import DynamicConfig
from alerts.core.ports import ConfigReader
from alerts.core.triggers import TriggerClassifier
from shared.models import AlertRule, ReloadResult

from .message_format import message_format_from_config

LOGGER = logging.getLogger("AlertRuleStore")

ALERTS_KEY = "Alerts"
_FALSE_STRINGS = {"false", "no"}


@dataclass(frozen=True)
class RuleSnapshot:
    """Everything readers need, swapped as one reference on reload."""

    rules: tuple[AlertRule, ...] = ()
    active_triggers: frozenset[str] = frozenset()
    definitions: tuple[Mapping[str, Any], ...] = field(default_factory=tuple)


def _string_or_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item) for item in value if item is not None]
    if isinstance(value, (str, int)):
        return [str(value)]
    return []


def parse_rule(
    config: ConfigReader, index: int, classifier: TriggerClassifier
) -> AlertRule:
    """Parse ``Alerts.<index>`` into an AlertRule."""
    key = f"{ALERTS_KEY}.{index}"

    raw_triggers = tuple(t.lower() for t in _string_or_list(config.get_optional(f"{key}.Trigger")))
    triggers = frozenset(
        trigger
        for trigger in (classifier.classify(raw) for raw in raw_triggers)
        if trigger is not None
    )

    targets = tuple(_string_or_list(config.get_optional(f"{key}.Target")))

    async_ = True
    async_value = config.get_optional_str(f"{key}.Async")
    if async_value is not None and async_value.strip().lower() in _FALSE_STRINGS:
        async_ = False

    ignore_cancelled = config.get_optional_bool(f"{key}.IgnoreCancelled")

    conditions = tuple(
        expression
        for expression in (config.get_optional_str_list(f"{key}.Conditions") or [])
        if expression.strip()
    )

    definition = config.get_optional(key)
    return AlertRule(
        index=index,
        raw_triggers=raw_triggers,
        triggers=triggers,
        targets=targets,
        async_=async_,
        ignore_cancelled=True if ignore_cancelled is None else ignore_cancelled,
        conditions=conditions,
        format=message_format_from_config(config, key),
        definition=definition if isinstance(definition, Mapping) else {},
    )


class AlertRuleStore:
    def __init__(self, classifier: TriggerClassifier) -> None:
        self._classifier = classifier
        self._snapshot = RuleSnapshot()

    @property
    def snapshot(self) -> RuleSnapshot:
        return self._snapshot

    @property
    def rules(self) -> tuple[AlertRule, ...]:
        return self._snapshot.rules

    @property
    def active_triggers(self) -> frozenset[str]:
        return self._snapshot.active_triggers

    def reload(self, rule_defs: Sequence[Any]) -> ReloadResult:
        """Parse *rule_defs* and replace the current snapshot.

        Entries that are not mappings are logged and skipped; they keep their
        position so ``Alerts.<index>`` paths still line up with the file.
        """
        self._classifier.clear()
        config = DynamicConfig({ALERTS_KEY: list(rule_defs)})

        rules: list[AlertRule] = []
        active: set[str] = set()
        for index, definition in enumerate(rule_defs):
            if not isinstance(definition, Mapping):
                LOGGER.warning(f"Skipping alert #{index}: expected a mapping, got {type(definition).__name__}")
                continue
            try:
                rule = parse_rule(config, index, self._classifier)
            except Exception as e:
                LOGGER.error(f"Skipping alert #{index}: {type(e).__name__}: {e}")
                continue

            if not rule.triggers:
                LOGGER.warning(f"Alert #{index} has no valid trigger (raw: {list(rule.raw_triggers)})")
            rules.append(rule)
            active.update(rule.triggers)

        self._snapshot = RuleSnapshot(
            rules=tuple(rules),
            active_triggers=frozenset(active),
            definitions=tuple(rule.definition for rule in rules),
        )
        return ReloadResult(count=len(rules), active_triggers=self._snapshot.active_triggers)
