"""discord.py implementation of the chat bridge."""

from __future__ import annotations

import logging
import re

import discord

from shared.models import MessageFormat, Translator

from .embeds import build_embed

LOGGER = logging.getLogger("DiscordBridge")

EMOTE_PATTERN = re.compile(r":([A-Za-z0-9_~]{2,32}):")


class DiscordBridge:
    def __init__(self, client: discord.Client, main_guild_id: int | None = None) -> None:
        self._client = client
        self._main_guild_id = main_guild_id

    @property
    def client(self) -> discord.Client:
        return self._client

    @property
    def main_guild(self) -> discord.Guild | None:
        if self._main_guild_id is not None:
            guild = self._client.get_guild(self._main_guild_id)
            if guild is not None:
                return guild
        guilds = self._client.guilds
        return guilds[0] if guilds else None

    @property
    def bot_avatar_url(self) -> str | None:
        user = self._client.user
        return user.display_avatar.url if user is not None else None

    @property
    def bot_name(self) -> str | None:
        guild = self.main_guild
        if guild is not None and guild.me is not None:
            return guild.me.display_name
        user = self._client.user
        return user.name if user is not None else None

    def translate_emotes(self, text: str, guild: discord.Guild | None) -> str:
        """Replace ``:name:`` with the matching custom emoji of *guild*."""
        emojis = guild.emojis if guild is not None else self._client.emojis
        if not emojis:
            return text
        by_name = {emoji.name: emoji for emoji in emojis if emoji.available}

        def _replace(match: re.Match) -> str:
            emoji = by_name.get(match.group(1))
            return str(emoji) if emoji is not None else match.group(0)

        return EMOTE_PATTERN.sub(_replace, text)

    def translate_message(
        self, message_format: MessageFormat, translator: Translator
    ) -> tuple[str | None, discord.Embed | None] | None:
        rendered = message_format.translate(translator)
        embed = build_embed(rendered)
        if not rendered.content and embed is None:
            LOGGER.debug("Rendered alert message is empty")
            return None
        return rendered.content, embed
