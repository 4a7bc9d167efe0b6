"""discord.py and HTTP collaborators for the alert engine."""

from .bridge import DiscordBridge
from .channels import DiscordChannelResolver
from .delivery import DiscordDelivery
from .embeds import build_embed, build_webhook_payload
from .webhook import WebhookClient

__all__ = [
    "DiscordBridge",
    "DiscordChannelResolver",
    "DiscordDelivery",
    "WebhookClient",
    "build_embed",
    "build_webhook_payload",
]
