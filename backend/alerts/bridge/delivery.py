"""Fire-and-forget message delivery on the bot's event loop."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Future
from typing import Any

import discord

LOGGER = logging.getLogger("DiscordDelivery")

WEBHOOK_NAME = "Alerts"


class DiscordDelivery:
    """Sends alert messages from any thread.

    Coroutines are handed to the client's loop with
    ``asyncio.run_coroutine_threadsafe``; failures are logged when the future
    completes.
    """

    def __init__(self, client: discord.Client) -> None:
        self._client = client
        self._webhooks: dict[int, discord.Webhook] = {}
        self._webhook_lock = asyncio.Lock()

    def deliver_direct(self, channel: Any, content: str | None, embed: discord.Embed | None) -> None:
        kwargs: dict[str, Any] = {}
        if content:
            kwargs["content"] = content
        if embed is not None:
            kwargs["embed"] = embed
        if not kwargs:
            LOGGER.debug(f"Nothing to send to #{getattr(channel, 'name', channel)}")
            return
        self._schedule(channel.send(**kwargs), f"message to #{getattr(channel, 'name', channel)}")

    def deliver_webhook(
        self,
        channel: Any,
        username: str | None,
        avatar_url: str | None,
        content: str | None,
        embed: discord.Embed | None,
    ) -> None:
        self._schedule(
            self._send_webhook(channel, username, avatar_url, content, embed),
            f"webhook message to #{getattr(channel, 'name', channel)}",
        )

    async def _send_webhook(
        self,
        channel: Any,
        username: str | None,
        avatar_url: str | None,
        content: str | None,
        embed: discord.Embed | None,
    ) -> None:
        thread = None
        target = channel
        if isinstance(channel, discord.Thread):
            thread = channel
            target = channel.parent

        webhook = await self._get_webhook(target)
        kwargs: dict[str, Any] = {}
        if content:
            kwargs["content"] = content
        if embed is not None:
            kwargs["embed"] = embed
        if username:
            kwargs["username"] = username
        if avatar_url:
            kwargs["avatar_url"] = avatar_url
        if thread is not None:
            kwargs["thread"] = thread
        await webhook.send(**kwargs)

    async def _get_webhook(self, channel: discord.TextChannel) -> discord.Webhook:
        async with self._webhook_lock:
            webhook = self._webhooks.get(channel.id)
            if webhook is not None:
                return webhook

            for existing in await channel.webhooks():
                if existing.name == WEBHOOK_NAME and existing.token:
                    webhook = existing
                    break
            else:
                webhook = await channel.create_webhook(name=WEBHOOK_NAME)
                LOGGER.info(f"Created alerts webhook in #{channel.name}")

            self._webhooks[channel.id] = webhook
            return webhook

    def _schedule(self, coro: Any, description: str) -> Future | None:
        loop = self._client.loop
        if not loop or loop.is_closed():
            coro.close()
            LOGGER.warning(f"Discord client is not running, dropped {description}")
            return None

        future = asyncio.run_coroutine_threadsafe(coro, loop)

        def _done(done: Future) -> None:
            if done.cancelled():
                return
            exc = done.exception()
            if exc is not None:
                LOGGER.error(f"Failed to send {description}: {type(exc).__name__}: {exc}")

        future.add_done_callback(_done)
        return future
