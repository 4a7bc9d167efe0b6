"""MessageFormat to discord.py embeds and webhook payloads."""

from __future__ import annotations

from typing import Any

import discord

from shared.models import MessageFormat


def build_embed(message_format: MessageFormat) -> discord.Embed | None:
    """Build the embed part of a rendered template, or None without one."""
    if not message_format.has_embed:
        return None

    embed = discord.Embed(
        title=message_format.title,
        url=message_format.title_url,
        description=message_format.description,
        color=message_format.color,
        timestamp=message_format.effective_timestamp(),
    )

    if message_format.author_name:
        embed.set_author(
            name=message_format.author_name,
            url=message_format.author_url,
            icon_url=message_format.author_image_url,
        )
    if message_format.thumbnail_url:
        embed.set_thumbnail(url=message_format.thumbnail_url)
    for field in message_format.fields:
        embed.add_field(name=field.title, value=field.value, inline=field.inline)
    if message_format.image_url:
        embed.set_image(url=message_format.image_url)
    if message_format.footer_text:
        embed.set_footer(text=message_format.footer_text, icon_url=message_format.footer_icon_url)

    return embed


def build_webhook_payload(message_format: MessageFormat) -> dict[str, Any]:
    """JSON body for a Discord webhook execute request."""
    payload: dict[str, Any] = {}
    if message_format.content:
        payload["content"] = message_format.content
    if message_format.webhook_name:
        payload["username"] = message_format.webhook_name
    if message_format.webhook_avatar_url:
        payload["avatar_url"] = message_format.webhook_avatar_url

    embed = build_embed(message_format)
    if embed is not None:
        payload["embeds"] = [embed.to_dict()]
    return payload
