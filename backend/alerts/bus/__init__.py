"""In-process host event bus."""

from .events import (
    Actor,
    AsyncPlayerChatEvent,
    BlockBreakEvent,
    Cancellable,
    CommandEvent,
    Event,
    HasActor,
    PlayerChatEvent,
    PlayerCommandEvent,
    PlayerEvent,
    PlayerHandshakeEvent,
    PlayerJoinEvent,
    PlayerQuitEvent,
    ServerCommandEvent,
    call_event,
    qualified_name,
)
from .handlers import DEFAULT_REGISTRY, HandlerList, HandlerRegistry, RegisteredListener

__all__ = [
    # Registry
    "DEFAULT_REGISTRY",
    "HandlerList",
    "HandlerRegistry",
    "RegisteredListener",
    # Capabilities
    "Actor",
    "Cancellable",
    "CommandEvent",
    "Event",
    "HasActor",
    "call_event",
    "qualified_name",
    # Standard events
    "AsyncPlayerChatEvent",
    "BlockBreakEvent",
    "PlayerChatEvent",
    "PlayerCommandEvent",
    "PlayerEvent",
    "PlayerHandshakeEvent",
    "PlayerJoinEvent",
    "PlayerQuitEvent",
    "ServerCommandEvent",
]
