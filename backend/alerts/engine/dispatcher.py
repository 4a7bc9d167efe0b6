"""Per-event alert dispatch."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from alerts.bus.events import Cancellable, CommandEvent, HasActor, PlayerCommandEvent
from alerts.core.config import DEFAULT_SYNC_EVENT_NAMES
from alerts.core.ports import (
    Bridge,
    ChannelResolver,
    Delivery,
    ExpressionEvaluator,
    Scheduler,
    Server,
    WebhookSender,
)
from shared.models import AlertRule, MessageFormat

from .expressions import ExpressionError, ExpressionParseError
from .rendering import EvaluationContext, Renderer
from .store import AlertRuleStore

LOGGER = logging.getLogger("AlertDispatcher")

EmbedBuilder = Callable[[MessageFormat], Any]


def event_name(event: Any) -> str:
    name = getattr(event, "event_name", None)
    return name if isinstance(name, str) else type(event).__name__


def normalize_command(raw: str) -> tuple[str, list[str]]:
    """Split a command line into ``(command, args)``.

    ``ns:base rest of line`` becomes ``("base rest of line", ["rest", "of", "line"])``.
    """
    base, _, remainder = raw.partition(" ")
    base = base.rsplit(":", 1)[-1]
    args = remainder.split(" ") if remainder else []
    return (f"{base} {remainder}" if remainder else base), args


def command_line(event: Any) -> str | None:
    if isinstance(event, PlayerCommandEvent):
        return event.message[1:] if event.message.startswith("/") else event.message
    if isinstance(event, CommandEvent):
        return event.command_line
    return None


class AlertDispatcher:
    """Runs every matching rule of the current store snapshot for one event.

    Nothing raised while handling an event propagates to the caller; failures
    are logged per event and per channel.
    """

    def __init__(
        self,
        store: AlertRuleStore,
        resolver: ChannelResolver,
        delivery: Delivery,
        renderer: Renderer,
        evaluator: ExpressionEvaluator,
        scheduler: Scheduler,
        *,
        bridge: Bridge | None = None,
        server: Server | None = None,
        webhook_sender: WebhookSender | None = None,
        fallback_webhook_url: str = "",
        sync_event_names: Iterable[str] = DEFAULT_SYNC_EVENT_NAMES,
        embed_builder: EmbedBuilder | None = None,
        detach: Callable[[Any], None] | None = None,
        alerts: Any = None,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._delivery = delivery
        self._renderer = renderer
        self._evaluator = evaluator
        self._scheduler = scheduler
        self._bridge = bridge
        self._server = server
        self._webhook_sender = webhook_sender
        self._fallback_webhook_url = fallback_webhook_url
        self._sync_event_names = frozenset(name.lower() for name in sync_event_names)
        self._embed_builder = embed_builder
        self._detach = detach
        self._alerts = alerts

    def handle_event(self, event: Any) -> None:
        try:
            snapshot = self._store.snapshot
            if not self.is_relevant(event, snapshot.active_triggers):
                get_handlers = getattr(event, "get_handlers", None)
                if self._detach is not None and get_handlers is not None:
                    self._detach(get_handlers())
                return

            for rule in snapshot.rules:
                if self.is_async(rule):
                    self._scheduler.submit(self.process, event, rule)
                else:
                    self.process(event, rule)
        except Exception:
            LOGGER.exception(f"Failed to handle {event_name(event)}")

    @staticmethod
    def is_relevant(event: Any, active_triggers: frozenset[str]) -> bool:
        is_command = isinstance(event, CommandEvent)
        name = event_name(event).lower()
        for trigger in active_triggers:
            if is_command and trigger.startswith("/"):
                return True
            if trigger == name:
                return True
        return False

    def is_async(self, rule: AlertRule) -> bool:
        if not rule.async_:
            return False
        return not any(trigger.lower() in self._sync_event_names for trigger in rule.triggers)

    # ------------------------------------------------------------------
    # Rule processing
    # ------------------------------------------------------------------

    def process(self, event: Any, rule: AlertRule) -> None:
        name = event_name(event)
        if rule.format is None:
            LOGGER.debug(f"Not running alert #{rule.index} for {name}: nothing to send")
            return

        command: str | None = None
        args: list[str] = []
        raw_command = command_line(event)
        if raw_command is not None:
            command, args = normalize_command(raw_command)

        matched = self.matching_trigger(rule, name, command)
        if matched is None:
            return

        if isinstance(event, Cancellable) and event.cancelled and rule.ignore_cancelled:
            LOGGER.debug(f"Not running alert for event {name}: event was cancelled")
            return

        if not rule.targets:
            LOGGER.debug(f"Not running alert for trigger {matched}: no target was defined")
            return

        channels = self.resolve_channels(rule.targets)
        if not channels:
            LOGGER.debug(
                f"Not running alert for trigger {matched}: no target channel was "
                f"defined/found (targets: {list(rule.targets)})"
            )
            return

        player = event.actor if isinstance(event, HasActor) else None
        sender = event.sender if isinstance(event, CommandEvent) else None

        for channel in channels:
            context = EvaluationContext(
                event=event,
                server=self._server,
                bridge=self._bridge,
                alerts=self._alerts,
                player=player,
                sender=sender,
                command=command,
                args=args,
                channel=channel,
                client=self._bridge.client if self._bridge is not None else None,
            )
            try:
                if not self.conditions_met(rule, matched, context):
                    continue
                self.deliver(rule.format, context)
            except Exception:
                LOGGER.exception(f"Failed to send alert for trigger {matched} to {channel!r}")

    @staticmethod
    def matching_trigger(rule: AlertRule, name: str, command: str | None) -> str | None:
        for trigger in rule.triggers:
            if trigger.startswith("/"):
                if not command or not command.strip():
                    continue
                first = command.lower().split(maxsplit=1)
                if first and first[0] == trigger[1:]:
                    return trigger
            elif trigger == name.lower():
                return trigger
        return None

    def resolve_channels(self, targets: Iterable[str]) -> list[Any]:
        """Resolve targets by game channel, then by name, then by numeric id.

        Each strategy covers every target; the first one that finds anything wins.
        """
        targets = list(targets)
        strategies = (
            (self._resolver.game_channel, targets),
            (self._resolver.channels_by_name, targets),
            (self._resolver.channel_by_id, [t for t in targets if t.isdigit()]),
        )
        for lookup, names in strategies:
            channels: list[Any] = []
            for name in names:
                for channel in lookup(name):
                    if not any(channel is existing for existing in channels):
                        channels.append(channel)
            if channels:
                return channels
        return []

    def conditions_met(self, rule: AlertRule, trigger: str, context: EvaluationContext) -> bool:
        names = context.names()
        for expression in rule.conditions:
            try:
                value = self._evaluator.evaluate(expression, names, bool)
            except ExpressionParseError as e:
                LOGGER.error(
                    f'Error while parsing expression "{expression}" for trigger "{trigger}" -> {e}'
                )
                return False
            except ExpressionError as e:
                LOGGER.error(
                    f'Error while evaluating expression "{expression}" for trigger "{trigger}" -> {e}'
                )
                return False
            if value is not None and not value:
                return False
        return True

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def deliver(self, message_format: MessageFormat, context: EvaluationContext) -> None:
        translator = self._renderer.translator(context)
        channel = context.channel

        if message_format.use_webhooks:
            if self._bridge is not None:
                translated = self._bridge.translate_message(message_format, translator)
                if translated is None:
                    return
                content, embed = translated
                self._delivery.deliver_webhook(
                    channel,
                    translator(message_format.webhook_name, False),
                    translator(message_format.webhook_avatar_url, False),
                    content,
                    embed,
                )
                return

            url = message_format.webhook_url or self._fallback_webhook_url
            if not url or self._webhook_sender is None:
                LOGGER.warning("Webhook alert skipped: no webhook url configured")
                return
            self._webhook_sender.send(message_format.translate(translator), url)
            return

        rendered = message_format.translate(translator)
        embed = self._embed_builder(rendered) if self._embed_builder is not None else None
        self._delivery.deliver_direct(channel, rendered.content, embed)
