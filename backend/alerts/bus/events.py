"""Host event types.

Subclassing :class:`Event` creates the subclass's HandlerList at class
creation time. Pass ``abstract=True`` for intermediate base classes and
``registry=`` to bind a type family to a registry other than the default.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Protocol

from .handlers import DEFAULT_REGISTRY, HandlerList, HandlerRegistry


class Actor(Protocol):
    """The player (or other entity) an event is about."""

    name: str
    display_name: str
    unique_id: str
    world_name: str
    ping: int


def qualified_name(event_type: type) -> str:
    return f"{event_type.__module__}.{event_type.__qualname__}"


class Event:
    registry: ClassVar[HandlerRegistry] = DEFAULT_REGISTRY

    def __init_subclass__(
        cls,
        abstract: bool = False,
        registry: HandlerRegistry | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)
        if registry is not None:
            cls.registry = registry
        if not abstract:
            cls._handler_list = HandlerList(cls, cls.registry)

    @classmethod
    def get_handler_list(cls) -> HandlerList:
        handler_list = cls.__dict__.get("_handler_list")
        if handler_list is None:
            raise TypeError(f"{cls.__name__} is abstract and has no handler list")
        return handler_list

    def get_handlers(self) -> HandlerList:
        return type(self).get_handler_list()

    @property
    def event_name(self) -> str:
        return type(self).__name__


class Cancellable:
    cancelled: bool = False

    def set_cancelled(self, cancelled: bool) -> None:
        self.cancelled = cancelled


class HasActor(ABC):
    """Capability for events that concern a single actor."""

    @property
    @abstractmethod
    def actor(self) -> Actor | None: ...


class CommandEvent(ABC):
    """Capability for command-shaped events."""

    @property
    @abstractmethod
    def command_line(self) -> str:
        """The command without any leading slash."""

    @property
    @abstractmethod
    def sender(self) -> Any: ...


def call_event(event: Event) -> Event:
    """Deliver *event* to every listener of its type on the calling thread."""
    event.get_handlers().call(event)
    return event


# ============================================
# Standard events
# ============================================


class PlayerEvent(Event, HasActor, abstract=True):
    def __init__(self, player: Actor) -> None:
        self.player = player

    @property
    def actor(self) -> Actor | None:
        return self.player


class PlayerJoinEvent(PlayerEvent):
    pass


class PlayerQuitEvent(PlayerEvent):
    pass


class PlayerChatEvent(PlayerEvent, Cancellable):
    """Legacy synchronous chat event."""

    def __init__(self, player: Actor, message: str) -> None:
        super().__init__(player)
        self.message = message


class AsyncPlayerChatEvent(PlayerEvent, Cancellable):
    def __init__(self, player: Actor, message: str) -> None:
        super().__init__(player)
        self.message = message


class PlayerCommandEvent(PlayerEvent, Cancellable, CommandEvent):
    """A player typed ``/command args``; ``message`` keeps the slash."""

    def __init__(self, player: Actor, message: str) -> None:
        super().__init__(player)
        self.message = message

    @property
    def command_line(self) -> str:
        return self.message[1:] if self.message.startswith("/") else self.message

    @property
    def sender(self) -> Any:
        return self.player


class ServerCommandEvent(Event, Cancellable, CommandEvent):
    def __init__(self, sender: Any, command: str) -> None:
        self._sender = sender
        self.command = command

    @property
    def command_line(self) -> str:
        return self.command

    @property
    def sender(self) -> Any:
        return self._sender


class PlayerHandshakeEvent(Event, Cancellable):
    def __init__(self, original_handshake: str) -> None:
        self.original_handshake = original_handshake


class BlockBreakEvent(Event, HasActor, Cancellable):
    def __init__(self, player: Actor, block: Any) -> None:
        self.player = player
        self.block = block

    @property
    def actor(self) -> Actor | None:
        return self.player
