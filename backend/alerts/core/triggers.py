"""Trigger classification: raw config strings to canonical trigger ids."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable

from shared.cache import ExpiringCache

LOGGER = logging.getLogger("TriggerClassifier")

# (ident '.')* ident; identifiers may contain '$'
_IDENT = r"(?:[^\W\d]|\$)(?:\w|\$)*"
VALID_EVENT_NAME_PATTERN = re.compile(rf"{_IDENT}(?:\.{_IDENT})*")

COMMAND_PREFIX = "/"


def validate_event_name(raw: str) -> str | None:
    """Return the lower-cased event name, or None if *raw* is not an identifier."""
    match = VALID_EVENT_NAME_PATTERN.fullmatch(raw.strip())
    if match is None:
        return None
    return match.group().lower()


class TriggerClassifier:
    """Classifies triggers with a TTL cache over event-name validation.

    Command triggers (``/name``) are never cached: their canonical form is the
    lower-cased input. Failed event classifications are cached too, so an
    invalid trigger is not re-validated until its entry expires or the cache
    is cleared on reload.
    """

    def __init__(
        self,
        *,
        ttl: float = 60.0,
        maxsize: int = 1024,
        validator: Callable[[str], str | None] = validate_event_name,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._validator = validator
        self._cache = ExpiringCache(maxsize=maxsize, ttl=ttl, timer=timer)

    def classify(self, raw: str) -> str | None:
        if raw.startswith(COMMAND_PREFIX):
            return raw.lower()

        result = self._cache.get_or_compute(raw, self._validator)
        if result is None:
            LOGGER.debug(f"Trigger '{raw}' is not a valid event name, it will never fire")
        return result

    def clear(self) -> None:
        self._cache.clear()

    @property
    def cached_entries(self) -> int:
        return self._cache.size
