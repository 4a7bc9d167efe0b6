"""Builds MessageFormat templates from rule configuration."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from alerts.core.ports import ConfigReader
from shared.models import BLANK_FIELD_TEXT, EmbedField, MessageFormat

logger = logging.getLogger(__name__)


def _non_blank(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


def parse_color(config: ConfigReader, path: str) -> int | None:
    """Read ``#RRGGBB``/``RRGGBB`` or an integer RGB value."""
    raw = config.get_optional(path)
    if raw is None:
        return None
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw & 0xFFFFFF

    hex_color = str(raw).strip()
    if not hex_color.startswith("#"):
        hex_color = "#" + hex_color
    if len(hex_color) != 7:
        logger.debug(f"Invalid color hex: {hex_color} (in {path})")
        return None
    try:
        return int(hex_color[1:], 16)
    except ValueError:
        logger.debug(f"Invalid color hex: {hex_color} (in {path})")
        return None


def parse_fields(entries: list[str]) -> tuple[EmbedField, ...]:
    """Parse ``title;value[;inline]`` entries.

    An entry without ``;`` is a blank spacer field whose text is the inline flag.
    """
    result: list[EmbedField] = []
    for entry in entries:
        if ";" in entry:
            parts = entry.split(";")
            if len(parts) < 2:
                continue
            inline = len(parts) < 3 or parts[2].strip().lower() == "true"
            result.append(EmbedField(title=parts[0], value=parts[1], inline=inline))
        else:
            result.append(
                EmbedField(
                    title=BLANK_FIELD_TEXT,
                    value=BLANK_FIELD_TEXT,
                    inline=entry.strip().lower() == "true",
                )
            )
    return tuple(result)


def message_format_from_config(config: ConfigReader, key: str) -> MessageFormat | None:
    """Build the template stored under *key*, or None when it has nothing to send."""
    if config.get_optional(key) is None:
        return None

    enabled = config.get_optional_bool(f"{key}.Enabled")
    if enabled is False:
        return None

    values: dict = {}

    embed_key = f"{key}.Embed"
    if (
        config.get_optional(embed_key) is not None
        and config.get_optional_bool(f"{embed_key}.Enabled") is not False
    ):
        values["color"] = parse_color(config, f"{embed_key}.Color")

        if config.get_optional(f"{embed_key}.Author") is not None:
            values["author_name"] = _non_blank(config.get_optional_str(f"{embed_key}.Author.Name"))
            values["author_url"] = _non_blank(config.get_optional_str(f"{embed_key}.Author.Url"))
            values["author_image_url"] = _non_blank(
                config.get_optional_str(f"{embed_key}.Author.ImageUrl")
            )

        values["thumbnail_url"] = _non_blank(config.get_optional_str(f"{embed_key}.ThumbnailUrl"))
        values["title"] = _non_blank(config.get_optional_str(f"{embed_key}.Title.Text"))
        values["title_url"] = _non_blank(config.get_optional_str(f"{embed_key}.Title.Url"))
        values["description"] = _non_blank(config.get_optional_str(f"{embed_key}.Description"))

        field_entries = config.get_optional_str_list(f"{embed_key}.Fields")
        if field_entries:
            values["fields"] = parse_fields(field_entries)

        values["image_url"] = _non_blank(config.get_optional_str(f"{embed_key}.ImageUrl"))

        if config.get_optional(f"{embed_key}.Footer") is not None:
            values["footer_text"] = _non_blank(config.get_optional_str(f"{embed_key}.Footer.Text"))
            values["footer_icon_url"] = _non_blank(
                config.get_optional_str(f"{embed_key}.Footer.IconUrl")
            )

        timestamp = config.get_optional(f"{embed_key}.Timestamp")
        if isinstance(timestamp, bool):
            values["use_current_timestamp"] = timestamp
        else:
            epoch_millis = config.get_optional_int(f"{embed_key}.Timestamp")
            if epoch_millis is not None:
                values["timestamp"] = datetime.fromtimestamp(epoch_millis / 1000, tz=timezone.utc)

    webhook_key = f"{key}.Webhook"
    if (
        config.get_optional(webhook_key) is not None
        and config.get_optional_bool(f"{webhook_key}.Enable") is True
    ):
        values["use_webhooks"] = True
        values["webhook_avatar_url"] = _non_blank(
            config.get_optional_str(f"{webhook_key}.AvatarUrl")
        )
        values["webhook_name"] = _non_blank(config.get_optional_str(f"{webhook_key}.Name"))
        values["webhook_url"] = _non_blank(config.get_optional_str(f"{webhook_key}.Url"))

    values["content"] = _non_blank(config.get_optional_str(f"{key}.Content"))

    message_format = MessageFormat(**values)
    return message_format if message_format.has_any_content else None
