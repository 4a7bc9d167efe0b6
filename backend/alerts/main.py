import asyncio
import logging
import sys
import threading

import discord
from dotenv import load_dotenv

from alerts.bridge import (
    DiscordBridge,
    DiscordChannelResolver,
    DiscordDelivery,
    WebhookClient,
    build_embed,
)
from alerts.bus import DEFAULT_REGISTRY, ServerCommandEvent, call_event
from alerts.core import ALERTS_DIR, AlertSettings, ThreadPoolScheduler, YamlConfig, get_settings, setup_logging
from alerts.engine import AlertManager, build_manager

LOGGER: logging.Logger = logging.getLogger("Alerts")

RELOAD_COMMAND = "alerts reload"


class ConsoleSender:
    """Sender of commands typed into the process console."""

    name = "CONSOLE"
    display_name = "CONSOLE"

    def __repr__(self) -> str:
        return self.name


class AlertsClient(discord.Client):
    def __init__(self, settings: AlertSettings) -> None:
        intents = discord.Intents.default()
        intents.guilds = True
        intents.emojis_and_stickers = True
        super().__init__(intents=intents)

        self.settings = settings
        self.scheduler = ThreadPoolScheduler(max_workers=settings.async_workers)
        self.webhooks = WebhookClient(self.scheduler, timeout=settings.webhook_timeout)
        self.bridge = DiscordBridge(self, settings.main_guild_id)
        self.manager: AlertManager = build_manager(
            settings,
            YamlConfig(settings.alerts_config_path),
            DEFAULT_REGISTRY,
            DiscordChannelResolver(self, settings.game_channels),
            DiscordDelivery(self),
            bridge=self.bridge,
            webhook_sender=self.webhooks,
            embed_builder=build_embed,
            scheduler=self.scheduler,
        )
        self._console: threading.Thread | None = None

    async def on_ready(self) -> None:
        LOGGER.info(f"Logged in as {self.user} (ID: {self.user.id}) | {len(self.guilds)} guilds")
        await asyncio.to_thread(self.manager.reload_alerts)

        if self._console is None and sys.stdin is not None and sys.stdin.isatty():
            self._console = threading.Thread(
                target=self._read_console, name="alerts-console", daemon=True
            )
            self._console.start()

    def _read_console(self) -> None:
        sender = ConsoleSender()
        for line in sys.stdin:
            command = line.strip()
            if not command:
                continue
            if command.lower() == RELOAD_COMMAND:
                self.manager.reload_alerts()
                continue
            call_event(ServerCommandEvent(sender, command))

    async def close(self) -> None:
        self.manager.shutdown()
        self.webhooks.close()
        await super().close()


async def main() -> None:
    load_dotenv(dotenv_path=ALERTS_DIR / ".env", encoding="utf-8")
    settings = get_settings()
    setup_logging(settings.log_level)

    if not settings.discord_bot_token:
        LOGGER.error("DISCORD_BOT_TOKEN is not set")
        return

    async with AlertsClient(settings) as client:
        try:
            await client.start(settings.discord_bot_token)
        except (KeyboardInterrupt, asyncio.CancelledError):
            if not client.is_closed():
                await client.close()


def run() -> None:
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, asyncio.CancelledError):
        LOGGER.info("Alerts stopped")
    except Exception as e:
        LOGGER.error(f"Alerts crashed: {e}", exc_info=e)


if __name__ == "__main__":
    run()
