"""Text helpers for Discord-bound strings."""

import re

_FORMATTING_CODE_PATTERN = re.compile(r"[§&][0-9a-fk-orx]", re.IGNORECASE)
_MARKDOWN_CHARS = ("_", "*", "~", "|", ">", "`")


def escape_markdown(text: str | None) -> str:
    """Return *text* with Discord markdown characters escaped."""
    if text is None:
        return ""
    for char in _MARKDOWN_CHARS:
        text = text.replace(char, "\\" + char)
    return text


def strip_formatting(text: str | None) -> str:
    """Remove in-game colour and style codes (``§a``, ``&l``...)."""
    if text is None:
        return ""
    return _FORMATTING_CODE_PATTERN.sub("", text)
