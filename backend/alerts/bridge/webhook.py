"""Direct webhook posting, used when webhook mode has no chat bridge."""

from __future__ import annotations

import logging

import httpx

from alerts.core.ports import Scheduler
from shared.models import MessageFormat

from .embeds import build_webhook_payload

LOGGER = logging.getLogger("WebhookClient")


class WebhookClient:
    """Posts rendered templates as JSON to a webhook URL.

    Requests run on the alert scheduler so the calling thread never waits on
    the network.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        timeout: float = 10.0,
        http: httpx.Client | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._http = http or httpx.Client(timeout=timeout)

    def send(self, message_format: MessageFormat, url: str) -> None:
        payload = build_webhook_payload(message_format)
        if not payload.get("content") and not payload.get("embeds"):
            LOGGER.debug("Webhook alert has nothing to send")
            return
        self._scheduler.submit(self.post, url, payload)

    def post(self, url: str, payload: dict) -> bool:
        try:
            resp = self._http.post(url, json=payload)
            if resp.is_success:
                return True
            LOGGER.warning(f"Webhook returned {resp.status_code}: {resp.text[:200]}")
            return False
        except httpx.TimeoutException:
            LOGGER.warning("Webhook request timed out")
            return False
        except httpx.HTTPError as e:
            LOGGER.warning(f"Webhook request failed: {e}")
            return False

    def close(self) -> None:
        self._http.close()
