"""Target resolution against the bot's channel cache."""

from __future__ import annotations

from collections.abc import Mapping

import discord


class DiscordChannelResolver:
    """Resolves alert targets to text channels.

    ``game_channels`` maps game-side channel names (``global``, ``staff`` ...)
    to Discord channel ids.
    """

    def __init__(self, client: discord.Client, game_channels: Mapping[str, int] | None = None) -> None:
        self._client = client
        self._game_channels = {name.lower(): channel_id for name, channel_id in (game_channels or {}).items()}

    def game_channel(self, name: str) -> list[discord.abc.Messageable]:
        channel_id = self._game_channels.get(name.lower())
        if channel_id is None:
            return []
        return self._by_id(channel_id)

    def channels_by_name(self, name: str) -> list[discord.abc.Messageable]:
        return [
            channel
            for channel in self._client.get_all_channels()
            if isinstance(channel, discord.TextChannel) and channel.name.lower() == name.lower()
        ]

    def channel_by_id(self, channel_id: str) -> list[discord.abc.Messageable]:
        try:
            return self._by_id(int(channel_id))
        except ValueError:
            return []

    def _by_id(self, channel_id: int) -> list[discord.abc.Messageable]:
        channel = self._client.get_channel(channel_id)
        if isinstance(channel, (discord.TextChannel, discord.Thread)):
            return [channel]
        return []
