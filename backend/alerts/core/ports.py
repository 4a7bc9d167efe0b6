"""Collaborator interfaces consumed by the alert engine."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

from shared.models import MessageFormat, Translator


class ConfigReader(Protocol):
    def get_optional(self, path: str) -> Any | None: ...

    def get_optional_str(self, path: str) -> str | None: ...

    def get_optional_bool(self, path: str) -> bool | None: ...

    def get_optional_int(self, path: str) -> int | None: ...

    def get_optional_str_list(self, path: str) -> list[str] | None: ...


class HandlerListPort(Protocol):
    def register(self, listener: Any) -> None: ...

    def unregister(self, listener: Any) -> None: ...

    def registered_listeners(self) -> tuple[Any, ...]: ...


class EventRegistryPort(Protocol):
    """Host registry of dispatch lists.

    ``add_creation_hook``/``remove_creation_hook`` are optional; without them
    the interceptor polls ``handler_lists()``.
    """

    def handler_lists(self) -> list[Any]: ...


class ExpressionEvaluator(Protocol):
    def evaluate(
        self, expression: str, names: Mapping[str, Any], expected_type: type | None = None
    ) -> Any: ...


class ChannelResolver(Protocol):
    def game_channel(self, name: str) -> list[Any]: ...

    def channels_by_name(self, name: str) -> list[Any]: ...

    def channel_by_id(self, channel_id: str) -> list[Any]: ...


class Delivery(Protocol):
    def deliver_direct(self, channel: Any, content: str | None, embed: Any | None) -> None: ...

    def deliver_webhook(
        self,
        channel: Any,
        username: str | None,
        avatar_url: str | None,
        content: str | None,
        embed: Any | None,
    ) -> None: ...


class Bridge(Protocol):
    """Optional chat-platform integration."""

    @property
    def client(self) -> Any: ...

    @property
    def main_guild(self) -> Any | None: ...

    @property
    def bot_avatar_url(self) -> str | None: ...

    @property
    def bot_name(self) -> str | None: ...

    def translate_emotes(self, text: str, guild: Any | None) -> str: ...

    def translate_message(
        self, message_format: MessageFormat, translator: Translator
    ) -> tuple[str | None, Any | None] | None: ...


class PlaceholderProvider(Protocol):
    def replace_to_discord(self, text: str, player: Any | None) -> str: ...


class Server(Protocol):
    def tps_string(self) -> str: ...


class Scheduler(Protocol):
    def submit(self, fn: Callable[..., Any], *args: Any) -> Any: ...


class WebhookSender(Protocol):
    def send(self, message_format: MessageFormat, url: str) -> None: ...


class NoPlaceholders:
    """PlaceholderProvider used when no external provider is installed."""

    def replace_to_discord(self, text: str, player: Any | None) -> str:
        return text
