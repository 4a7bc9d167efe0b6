"""Alert manager: ties configuration, rule store, interceptor and dispatcher."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from alerts.core.config import AlertSettings
from alerts.core.config_reader import ConfigLoadError
from alerts.core.ports import (
    Bridge,
    ChannelResolver,
    ConfigReader,
    Delivery,
    EventRegistryPort,
    ExpressionEvaluator,
    NoPlaceholders,
    PlaceholderProvider,
    Scheduler,
    Server,
    WebhookSender,
)
from alerts.core.scheduler import ThreadPoolScheduler
from alerts.core.triggers import TriggerClassifier
from shared.models import ReloadResult

from .dispatcher import AlertDispatcher, EmbedBuilder
from .expressions import SimpleEvalEvaluator
from .interceptor import EventInterceptor
from .rendering import Renderer
from .store import ALERTS_KEY, AlertRuleStore

LOGGER = logging.getLogger("AlertManager")


class AlertManager:
    """Public surface of the alert engine.

    Reloading re-reads the configuration (when it supports ``reload()``),
    replaces the rule snapshot and re-subscribes the interceptor. With zero
    rules the interceptor stays unsubscribed.
    """

    def __init__(
        self,
        config: ConfigReader,
        store: AlertRuleStore,
        interceptor: EventInterceptor,
        dispatcher: AlertDispatcher | None = None,
        scheduler: Any = None,
    ) -> None:
        self.config = config
        self.store = store
        self.interceptor = interceptor
        self.dispatcher = dispatcher
        self._scheduler = scheduler

    def reload_alerts(self) -> ReloadResult:
        reload = getattr(self.config, "reload", None)
        if callable(reload):
            try:
                reload()
            except ConfigLoadError as e:
                LOGGER.error(f"Failed to reload alerts config, keeping previous alerts: {e}")
                return ReloadResult(
                    count=len(self.store.rules), active_triggers=self.store.active_triggers
                )

        rule_defs = self.config.get_optional(ALERTS_KEY)
        if rule_defs is None:
            rule_defs = []
        elif not isinstance(rule_defs, list):
            LOGGER.error(f"'{ALERTS_KEY}' must be a list, got {type(rule_defs).__name__}")
            rule_defs = []

        result = self.store.reload(rule_defs)

        if self.interceptor.registered:
            self.interceptor.unregister()
        if result.count > 0:
            self.interceptor.register()

        LOGGER.info(f"{result.count} alert{'' if result.count == 1 else 's'} registered")
        return result

    def get_alerts(self) -> tuple[Mapping[str, Any], ...]:
        return self.store.snapshot.definitions

    def register(self) -> None:
        self.interceptor.register()

    def unregister(self) -> None:
        self.interceptor.unregister()

    def shutdown(self) -> None:
        self.interceptor.unregister()
        shutdown = getattr(self._scheduler, "shutdown", None)
        if callable(shutdown):
            shutdown(wait=False)
        LOGGER.info("Alerts shut down")


def build_manager(
    settings: AlertSettings,
    config: ConfigReader,
    registry: EventRegistryPort,
    resolver: ChannelResolver,
    delivery: Delivery,
    *,
    bridge: Bridge | None = None,
    server: Server | None = None,
    placeholders: PlaceholderProvider | None = None,
    webhook_sender: WebhookSender | None = None,
    embed_builder: EmbedBuilder | None = None,
    scheduler: Scheduler | None = None,
    evaluator: ExpressionEvaluator | None = None,
) -> AlertManager:
    """Wire an AlertManager from settings and host collaborators."""
    scheduler = scheduler or ThreadPoolScheduler(max_workers=settings.async_workers)
    evaluator = evaluator or SimpleEvalEvaluator()
    classifier = TriggerClassifier(
        ttl=settings.trigger_cache_ttl, maxsize=settings.trigger_cache_size
    )
    store = AlertRuleStore(classifier)
    renderer = Renderer(
        evaluator,
        bridge=bridge,
        placeholders=placeholders or NoPlaceholders(),
        server=server,
        default_avatar_url=settings.default_avatar_url,
        default_bot_name=settings.default_bot_name,
        avatar_url_template=settings.avatar_url_template,
        timestamp_format=settings.timestamp_format,
    )

    dispatcher: AlertDispatcher | None = None

    def on_event(event: Any) -> None:
        if dispatcher is not None:
            dispatcher.handle_event(event)

    interceptor = EventInterceptor(
        registry,
        on_event,
        denied_event_types=settings.denied_event_types,
        reconcile_interval=settings.reconcile_interval,
    )
    manager = AlertManager(config, store, interceptor, scheduler=scheduler)
    dispatcher = AlertDispatcher(
        store,
        resolver,
        delivery,
        renderer,
        evaluator,
        scheduler,
        bridge=bridge,
        server=server,
        webhook_sender=webhook_sender,
        fallback_webhook_url=settings.fallback_webhook_url,
        sync_event_names=settings.sync_event_names,
        embed_builder=embed_builder,
        detach=interceptor.detach,
        alerts=manager,
    )
    manager.dispatcher = dispatcher
    return manager
