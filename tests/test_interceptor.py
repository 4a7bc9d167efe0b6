"""Tests for the catch-all event bus interceptor."""

import logging

import pytest

from alerts.bus import Event, HandlerList, HandlerRegistry, PlayerHandshakeEvent, qualified_name
from alerts.bus.handlers import DEFAULT_REGISTRY
from alerts.engine import EventInterceptor

MODULE_REGISTRY = HandlerRegistry()


class GuardedEvent(Event, registry=MODULE_REGISTRY):
    pass


class OpenEvent(Event, registry=MODULE_REGISTRY):
    pass


class PollingOnlyRegistry:
    """Registry without creation hooks, optionally serving extra fixed lists."""

    def __init__(self, *extra) -> None:
        self.inner = HandlerRegistry()
        self.extra = list(extra)

    def handler_lists(self):
        return self.extra + self.inner.handler_lists()


class RejectingHandlerList:
    """A list whose register() always raises *error*."""

    def __init__(self, error: Exception) -> None:
        self.error = error

    def registered_listeners(self):
        return ()

    def register(self, listener):
        raise self.error

    def unregister(self, listener):
        pass

    def __repr__(self) -> str:
        return "RejectingHandlerList()"


def _listeners(handler_list: HandlerList, interceptor: EventInterceptor) -> int:
    return sum(1 for lst in handler_list.registered_listeners() if lst is interceptor.listener)


@pytest.fixture
def received():
    return []


@pytest.fixture
def interceptors():
    created: list[EventInterceptor] = []
    yield created
    for interceptor in created:
        interceptor.unregister()


@pytest.fixture
def make_interceptor(received, interceptors):
    def _make(registry, **kwargs) -> EventInterceptor:
        kwargs.setdefault("denied_event_types", [])
        interceptor = EventInterceptor(registry, received.append, **kwargs)
        interceptors.append(interceptor)
        return interceptor

    return _make


# ── Subscription ─────────────────────────────────────────


class TestSubscription:
    def test_attaches_to_existing_lists(self, registry, make_interceptor, received):
        existing = HandlerList(object, registry)
        interceptor = make_interceptor(registry)

        interceptor.register()
        existing.call("event")

        assert interceptor.registered
        assert received == ["event"]

    def test_attaches_to_lists_created_later(self, registry, make_interceptor, received):
        interceptor = make_interceptor(registry)
        interceptor.register()

        class LateEvent(Event, registry=registry):
            pass

        LateEvent.get_handler_list().call("late")

        assert received == ["late"]

    def test_attach_is_idempotent(self, registry, make_interceptor):
        handler_list = HandlerList(object, registry)
        interceptor = make_interceptor(registry)
        interceptor.register()

        assert interceptor.attach(handler_list) is False
        interceptor.reconcile()

        assert _listeners(handler_list, interceptor) == 1

    def test_register_twice_is_noop(self, registry, make_interceptor):
        handler_list = HandlerList(object, registry)
        interceptor = make_interceptor(registry)

        interceptor.register()
        interceptor.register()

        assert _listeners(handler_list, interceptor) == 1

    def test_unregister_removes_everything(self, registry, make_interceptor, received):
        first = HandlerList(object, registry)
        interceptor = make_interceptor(registry)
        interceptor.register()

        interceptor.unregister()
        later = HandlerList(object, registry)
        first.call("a")
        later.call("b")

        assert received == []
        assert not interceptor.registered
        assert _listeners(first, interceptor) == 0
        assert _listeners(later, interceptor) == 0

    def test_detach_then_new_register_reattaches(self, registry, make_interceptor, received):
        handler_list = HandlerList(object, registry)
        interceptor = make_interceptor(registry)
        interceptor.register()

        interceptor.detach(handler_list)
        handler_list.call("ignored")
        interceptor.unregister()
        interceptor.register()
        handler_list.call("seen")

        assert received == ["seen"]

    def test_failing_list_does_not_stop_others(self, make_interceptor, received, caplog):
        registry = PollingOnlyRegistry(RejectingHandlerList(RuntimeError("list closed")))
        good = HandlerList(object, registry.inner)
        interceptor = make_interceptor(registry, reconcile_interval=60)

        with caplog.at_level(logging.ERROR, logger="EventInterceptor"):
            interceptor.register()
        good.call("a")

        assert received == ["a"]
        assert "list closed" in caplog.text
        assert "will not receive events" not in caplog.text

    def test_duplicate_registration_is_not_an_error(self, registry, make_interceptor):
        interceptor = make_interceptor(registry)

        assert interceptor.attach(RejectingHandlerList(ValueError("already registered"))) is False


# ── Deny-list ────────────────────────────────────────────


class TestDenyList:
    def test_denied_type_lookup_by_handler_list(self, make_interceptor):
        interceptor = make_interceptor(
            MODULE_REGISTRY, denied_event_types=[qualified_name(GuardedEvent)]
        )

        interceptor.register()

        assert _listeners(GuardedEvent.get_handler_list(), interceptor) == 0
        assert _listeners(OpenEvent.get_handler_list(), interceptor) == 1

    def test_default_deny_list_skips_handshake(self, make_interceptor):
        interceptor = make_interceptor(
            DEFAULT_REGISTRY, denied_event_types=[qualified_name(PlayerHandshakeEvent)]
        )

        interceptor.register()

        assert _listeners(PlayerHandshakeEvent.get_handler_list(), interceptor) == 0

    def test_denied_during_type_creation(self, registry, make_interceptor):
        interceptor = make_interceptor(
            registry, denied_event_types=["hostplugin.events.HandshakeLikeEvent"]
        )
        interceptor.register()

        denied = type("HandshakeLikeEvent", (Event,), {"__module__": "hostplugin.events"}, registry=registry)
        allowed = type("ChatLikeEvent", (Event,), {"__module__": "hostplugin.events"}, registry=registry)

        assert _listeners(denied.get_handler_list(), interceptor) == 0
        assert _listeners(allowed.get_handler_list(), interceptor) == 1

    def test_empty_deny_list(self, registry, make_interceptor):
        handler_list = HandlerList(object, registry)
        interceptor = make_interceptor(registry)

        assert interceptor.is_denied(handler_list) is False


# ── Polling fallback ─────────────────────────────────────


class TestPollingFallback:
    def test_polls_registry_without_hooks(self, make_interceptor, received):
        registry = PollingOnlyRegistry()
        first = HandlerList(object, registry.inner)
        interceptor = make_interceptor(registry, reconcile_interval=60)
        interceptor.register()

        second = HandlerList(object, registry.inner)
        assert _listeners(second, interceptor) == 0

        interceptor.reconcile()
        first.call("a")
        second.call("b")

        assert received == ["a", "b"]

    def test_unregister_stops_polling(self, make_interceptor):
        registry = PollingOnlyRegistry()
        interceptor = make_interceptor(registry, reconcile_interval=60)
        interceptor.register()
        thread = interceptor._poll_thread

        interceptor.unregister()

        assert thread is not None
        assert not thread.is_alive()
