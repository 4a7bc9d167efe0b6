"""Alerts service configuration"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# === Path Configuration ===
ALERTS_DIR = Path(__file__).parent.parent
BACKEND_DIR = ALERTS_DIR.parent

DEFAULT_DENIED_EVENT_TYPES = [
    # Breaks login negotiation for some integrations
    "alerts.bus.events.PlayerHandshakeEvent",
    # Forces chat onto the main thread
    "alerts.bus.events.PlayerChatEvent",
]

DEFAULT_SYNC_EVENT_NAMES = [
    # Block state is stale by the time a background task runs
    "BlockBreakEvent",
]


class AlertSettings(BaseSettings):
    """Alerts service settings"""

    model_config = SettingsConfigDict(
        env_file=ALERTS_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Discord
    discord_bot_token: str = Field(default="", description="Discord bot token")
    main_guild_id: int | None = Field(default=None, description="Guild used for bot nickname")
    game_channels: dict[str, int] = Field(
        default_factory=dict, description="Game channel name -> Discord channel ID"
    )

    # Alert rules
    alerts_config_path: Path = Field(
        default=ALERTS_DIR / "config.yml", description="YAML file holding the Alerts list"
    )
    trigger_cache_ttl: float = Field(default=60.0, description="Trigger classification TTL (s)")
    trigger_cache_size: int = Field(default=1024, description="Trigger classification entries")

    # Event bus
    reconcile_interval: float = Field(
        default=5.0, description="Registry poll interval when no creation hook exists"
    )
    async_workers: int = Field(default=4, description="Background alert worker threads")
    denied_event_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DENIED_EVENT_TYPES),
        description="Event types that never receive the alert listener",
    )
    sync_event_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SYNC_EVENT_NAMES),
        description="Event names whose alerts always run on the delivering thread",
    )

    # Delivery
    fallback_webhook_url: str = Field(
        default="", description="Webhook used when webhook mode has no bridge and no URL"
    )
    webhook_timeout: float = Field(default=10.0, description="Webhook HTTP timeout (s)")

    # Placeholders
    default_avatar_url: str = Field(
        default="https://cdn.discordapp.com/embed/avatars/0.png",
        description="Bot avatar used without a bridge",
    )
    default_bot_name: str = Field(default="Bot", description="Bot name used without a bridge")
    avatar_url_template: str = Field(
        default="https://mc-heads.net/avatar/{uuid}", description="Player avatar URL template"
    )
    timestamp_format: str = Field(default="%Y-%m-%d %H:%M:%S", description="{time}/{date} format")

    # Environment
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper

    @field_validator("trigger_cache_ttl", "reconcile_interval", "webhook_timeout")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v


@lru_cache
def get_settings() -> AlertSettings:
    """Get cached settings instance"""
    return AlertSettings()
