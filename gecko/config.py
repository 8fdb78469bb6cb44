"""GECkO configuration management."""

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from .media.models import ChannelKind

logger = logging.getLogger("gecko.config")


class GeckoSettings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    # Discord (destination)
    discord_token: Optional[str] = Field(default=None, description="Discord bot token")
    discord_api_url: str = Field(default="https://discord.com/api/v10", description="Discord REST base URL")
    news_channel_id: Optional[str] = Field(default=None, description="Channel mirroring website news")
    events_channel_id: Optional[str] = Field(default=None, description="Channel mirroring website events")

    # GECo website (remote feed)
    geco_api_key: Optional[str] = Field(default=None, description="GECo website API key")
    geco_api_url: str = Field(default="https://geco.ethz.ch/api/v2/web", description="GECo website API base URL")
    site_url: str = Field(default="https://geco.ethz.ch", description="Website origin for relative links")

    # Sync
    history_limit: int = Field(default=256, description="Messages read per channel when indexing")
    sync_interval: int = Field(default=600, description="Seconds between sync passes")
    sync_cron: Optional[str] = Field(default=None, description="Cron expression, overrides sync_interval")

    # Failure alerts (optional)
    telegram_bot_token: Optional[str] = Field(default=None, description="Telegram bot token for alerts")
    telegram_alert_chat_id: Optional[int] = Field(default=None, description="Telegram chat receiving alerts")

    model_config = {"env_prefix": "GECKO_", "env_file": ".env", "extra": "ignore"}

    def channels(self) -> dict[ChannelKind, str]:
        """Discord channel per kind, for the kinds that are configured."""
        channels = {}
        if self.news_channel_id:
            channels[ChannelKind.NEWS] = self.news_channel_id
        if self.events_channel_id:
            channels[ChannelKind.EVENTS] = self.events_channel_id
        return channels

    @property
    def alerts_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_alert_chat_id)


def load_settings() -> GeckoSettings:
    """Load settings from environment."""
    settings = GeckoSettings()

    if not settings.discord_token:
        logger.warning("GECKO_DISCORD_TOKEN is not set — Discord calls will be rejected.")
    if not settings.geco_api_key:
        logger.warning("GECKO_GECO_API_KEY is not set — the website feed will be rejected.")
    if not settings.channels():
        logger.warning("No news or events channel configured — nothing will be synchronized.")

    return settings
