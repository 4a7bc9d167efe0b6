"""Dispatch lists and the registry that tracks them.

Every concrete event type owns one HandlerList. Lists add themselves to a
HandlerRegistry when created, and the registry reports each new list to its
creation hooks, so observers see event types defined after they subscribed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .events import Event

LOGGER = logging.getLogger("EventBus")

CreationHook = Callable[["HandlerList"], None]


class RegisteredListener:
    """A callback registered on behalf of an owner object."""

    def __init__(self, owner: Any, callback: Callable[["Event"], None]) -> None:
        self.owner = owner
        self.callback = callback

    def call(self, event: Event) -> None:
        self.callback(event)

    def __repr__(self) -> str:
        return f"RegisteredListener(owner={type(self.owner).__name__})"


class HandlerList:
    """Listeners for one event type, called in registration order."""

    def __init__(self, event_type: type, registry: HandlerRegistry | None = None) -> None:
        self.event_type = event_type
        self._listeners: list[RegisteredListener] = []
        self._lock = threading.RLock()
        (registry if registry is not None else DEFAULT_REGISTRY).add(self)

    @property
    def event_name(self) -> str:
        return self.event_type.__name__

    def register(self, listener: RegisteredListener) -> None:
        with self._lock:
            if listener in self._listeners:
                raise ValueError(f"{listener!r} is already registered on {self.event_name}")
            self._listeners.append(listener)

    def unregister(self, listener: RegisteredListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def registered_listeners(self) -> tuple[RegisteredListener, ...]:
        with self._lock:
            return tuple(self._listeners)

    def call(self, event: Event) -> None:
        for listener in self.registered_listeners():
            try:
                listener.call(event)
            except Exception:
                LOGGER.exception(f"Listener {listener!r} failed on {self.event_name}")

    def __repr__(self) -> str:
        return f"HandlerList({self.event_name})"


class HandlerRegistry:
    """Append-only registry of every HandlerList, with creation hooks."""

    def __init__(self) -> None:
        self._lists: list[HandlerList] = []
        self._hooks: list[CreationHook] = []
        self._lock = threading.RLock()

    def add(self, handler_list: HandlerList) -> None:
        with self._lock:
            self._lists.append(handler_list)
            hooks = list(self._hooks)
        # Hooks run outside the lock so they may read the registry
        for hook in hooks:
            try:
                hook(handler_list)
            except Exception:
                LOGGER.exception(f"Creation hook failed for {handler_list!r}")

    def handler_lists(self) -> list[HandlerList]:
        with self._lock:
            return list(self._lists)

    def add_creation_hook(self, hook: CreationHook) -> None:
        with self._lock:
            if hook not in self._hooks:
                self._hooks.append(hook)

    def remove_creation_hook(self, hook: CreationHook) -> None:
        with self._lock:
            if hook in self._hooks:
                self._hooks.remove(hook)


DEFAULT_REGISTRY = HandlerRegistry()
