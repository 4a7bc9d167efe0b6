"""Renderable alert message model."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone

# Discord renders an empty field name/value with a left-to-right mark
BLANK_FIELD_TEXT = "‎"

Translator = Callable[[str | None, bool], str | None]


@dataclass(frozen=True)
class EmbedField:
    title: str
    value: str
    inline: bool = True


@dataclass(frozen=True)
class MessageFormat:
    """Plain content, an optional rich embed and an optional webhook envelope.

    ``timestamp`` is a fixed embed timestamp; ``use_current_timestamp`` asks for
    the render time instead.
    """

    content: str | None = None

    # Embed
    color: int | None = None
    author_name: str | None = None
    author_url: str | None = None
    author_image_url: str | None = None
    thumbnail_url: str | None = None
    title: str | None = None
    title_url: str | None = None
    description: str | None = None
    fields: tuple[EmbedField, ...] = field(default_factory=tuple)
    image_url: str | None = None
    footer_text: str | None = None
    footer_icon_url: str | None = None
    timestamp: datetime | None = None
    use_current_timestamp: bool = False

    # Webhook
    use_webhooks: bool = False
    webhook_name: str | None = None
    webhook_avatar_url: str | None = None
    webhook_url: str | None = None

    @property
    def has_embed(self) -> bool:
        return any(
            (
                self.color is not None,
                self.author_name,
                self.author_url,
                self.author_image_url,
                self.thumbnail_url,
                self.title,
                self.title_url,
                self.description,
                self.fields,
                self.image_url,
                self.footer_text,
                self.footer_icon_url,
                self.timestamp is not None,
                self.use_current_timestamp,
            )
        )

    @property
    def has_any_content(self) -> bool:
        """False for a template that must never be dispatched."""
        return bool(self.content) or self.has_embed or self.use_webhooks

    def effective_timestamp(self) -> datetime | None:
        if self.use_current_timestamp:
            return datetime.now(timezone.utc)
        return self.timestamp

    def translate(self, translator: Translator) -> MessageFormat:
        """Return a copy with every textual field passed through *translator*.

        Markdown bodies are translated with ``needs_escape=True``; names,
        titles and URLs with ``False``.
        """
        escaped = {"content", "description", "footer_text"}
        changes: dict = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, str):
                changes[f.name] = translator(value, f.name in escaped)
        changes["fields"] = tuple(
            EmbedField(
                title=translator(item.title, False) or BLANK_FIELD_TEXT,
                value=translator(item.value, True) or BLANK_FIELD_TEXT,
                inline=item.inline,
            )
            for item in self.fields
        )
        return replace(self, **changes)
