"""Template rendering: expression fragments, placeholders, emotes.

Resolution order for one piece of text:

1. ``${expression}`` fragments, evaluated against the context
2. ``{key}`` placeholders in the literal text, from the built-in table, then
   context variables; unknown keys stay as ``{key}``
3. bridge emote translation for the target channel's guild
4. the outbound placeholder provider
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from alerts.core.ports import Bridge, ExpressionEvaluator, PlaceholderProvider, Server
from alerts.core.text import escape_markdown, strip_formatting
from shared.models import Translator

from .expressions import ExpressionError

LOGGER = logging.getLogger("AlertRenderer")

EXPRESSION_PATTERN = re.compile(r"\$\{(.+?)\}")
PLACEHOLDER_PATTERN = re.compile(r"\{([^{}\s]+)\}")


@dataclass
class EvaluationContext:
    """Per event/rule/channel variables for conditions and templates."""

    event: Any
    server: Any = None
    bridge: Any = None
    alerts: Any = None
    player: Any = None
    sender: Any = None
    command: str | None = None
    args: list[str] = field(default_factory=list)
    channel: Any = None
    client: Any = None

    @property
    def all_args(self) -> str:
        return " ".join(self.args)

    def names(self) -> dict[str, Any]:
        return {
            "event": self.event,
            "server": self.server,
            "bridge": self.bridge,
            "alerts": self.alerts,
            "player": self.player,
            "sender": self.sender,
            "command": self.command,
            "args": list(self.args),
            "allArgs": self.all_args,
            "channel": self.channel,
            "client": self.client,
        }


def format_expressions(
    text: str,
    evaluator: ExpressionEvaluator,
    names: Mapping[str, Any],
    literal: Callable[[str], str] | None = None,
) -> str:
    """Replace every ``${...}`` fragment with its evaluated value.

    ``literal`` is applied to the text between fragments only, so expression
    output is never expanded again. A fragment that fails to evaluate is
    logged and left in place.
    """
    parts: list[str] = []
    position = 0
    for match in EXPRESSION_PATTERN.finditer(text):
        segment = text[position : match.start()]
        parts.append(literal(segment) if literal is not None else segment)
        expression = match.group(1)
        try:
            value = evaluator.evaluate(expression, names)
        except ExpressionError as e:
            LOGGER.error(f'Error while evaluating template expression "{expression}" -> {e}')
            parts.append(match.group(0))
        else:
            parts.append("" if value is None else str(value))
        position = match.end()
    tail = text[position:]
    parts.append(literal(tail) if literal is not None else tail)
    return "".join(parts)


def format_placeholders(text: str, resolve: Callable[[str], str | None]) -> str:
    def _replace(match: re.Match) -> str:
        value = resolve(match.group(1))
        return match.group(0) if value is None else value

    return PLACEHOLDER_PATTERN.sub(_replace, text)


class Renderer:
    def __init__(
        self,
        evaluator: ExpressionEvaluator,
        *,
        bridge: Bridge | None = None,
        placeholders: PlaceholderProvider | None = None,
        server: Server | None = None,
        default_avatar_url: str = "https://cdn.discordapp.com/embed/avatars/0.png",
        default_bot_name: str = "Bot",
        avatar_url_template: str = "https://mc-heads.net/avatar/{uuid}",
        timestamp_format: str = "%Y-%m-%d %H:%M:%S",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._evaluator = evaluator
        self._bridge = bridge
        self._placeholders = placeholders
        self._server = server
        self._default_avatar_url = default_avatar_url
        self._default_bot_name = default_bot_name
        self._avatar_url_template = avatar_url_template
        self._timestamp_format = timestamp_format
        self._clock = clock

    # ------------------------------------------------------------------
    # Built-in placeholders
    # ------------------------------------------------------------------

    def bot_avatar_url(self) -> str:
        if self._bridge is not None and self._bridge.bot_avatar_url:
            return self._bridge.bot_avatar_url
        return self._default_avatar_url

    def bot_name(self) -> str:
        if self._bridge is not None and self._bridge.bot_name:
            return self._bridge.bot_name
        return self._default_bot_name

    def avatar_url(self, player: Any) -> str:
        return self._avatar_url_template.format(
            uuid=getattr(player, "unique_id", ""),
            name=getattr(player, "name", ""),
        )

    def builtin_placeholder(self, key: str, player: Any, needs_escape: bool) -> str | None:
        if key == "tps":
            return self._server.tps_string() if self._server is not None else "N/A"
        if key in ("time", "date"):
            return self._clock().strftime(self._timestamp_format)
        if key == "ping":
            return str(player.ping) if player is not None else "-1"
        if key in ("name", "username"):
            return player.name if player is not None else ""
        if key == "displayname":
            if player is None:
                return ""
            display_name = player.display_name
            return strip_formatting(escape_markdown(display_name) if needs_escape else display_name)
        if key == "world":
            return player.world_name if player is not None else ""
        if key == "embedavatarurl":
            return self.avatar_url(player) if player is not None else self.bot_avatar_url()
        if key == "botavatarurl":
            return self.bot_avatar_url()
        if key == "botname":
            return self.bot_name()
        return None

    # ------------------------------------------------------------------
    # Translator
    # ------------------------------------------------------------------

    def translator(self, context: EvaluationContext) -> Translator:
        names = context.names()
        player = context.player
        guild = getattr(context.channel, "guild", None)

        def _context_value(key: str) -> str | None:
            if key not in names or names[key] is None:
                return None
            value = names[key]
            if isinstance(value, (list, tuple)):
                return " ".join(str(item) for item in value)
            return str(value)

        def translate(text: str | None, needs_escape: bool) -> str | None:
            if text is None:
                return None

            def _resolve(key: str) -> str | None:
                value = self.builtin_placeholder(key, player, needs_escape)
                if value is None:
                    value = _context_value(key)
                return value

            text = format_expressions(
                text, self._evaluator, names, lambda segment: format_placeholders(segment, _resolve)
            )

            if self._bridge is not None:
                text = self._bridge.translate_emotes(text, guild)
            if self._placeholders is not None:
                text = self._placeholders.replace_to_discord(text, player)
            return text

        return translate
