"""Failure alerts — tell an operator that a sync pass failed.

Alerts go to a Telegram chat when GECKO_TELEGRAM_BOT_TOKEN and
GECKO_TELEGRAM_ALERT_CHAT_ID are set; otherwise failures only end up
in the log.
"""

import asyncio
import logging
from typing import Optional

import httpx
from telegram import Bot
from telegram.error import TelegramError

from .media.errors import DestinationError, FeedUnavailableError, PostNotFoundError

logger = logging.getLogger("gecko.alerts")


def classify_error(e: Exception) -> str:
    """Classify a sync failure into a short operator-facing message."""
    if isinstance(e, FeedUnavailableError):
        return "Website feed unavailable. Discord was left untouched."
    if isinstance(e, PostNotFoundError):
        return f"No synchronized {e.kind} post with id {e.post_id}."

    if isinstance(e, DestinationError):
        code = e.status_code
        if code == 429:
            return "Discord kept rate limiting. The pass was aborted."
        if code in (401, 403):
            return "Discord rejected the bot token or channel permissions."
        if code is not None and 500 <= code < 600:
            return "Discord is having server issues. The pass was aborted."
        if code is not None:
            return f"Discord returned HTTP {code}. The pass was aborted."
        return "Cannot reach Discord. The pass was aborted."

    if isinstance(e, httpx.HTTPError):
        return "Network error during sync."
    if isinstance(e, asyncio.TimeoutError):
        return "Sync timed out."

    type_name = type(e).__name__
    return f"Sync failed ({type_name}). Check logs for details."


class AlertSender:
    """Sends alerts through a Telegram bot."""

    def __init__(self, token: str, chat_id: int, bot: Optional[Bot] = None):
        self._bot = bot or Bot(token)
        self._chat_id = chat_id

    async def send(self, text: str) -> bool:
        """Send an alert. Returns False if Telegram refused it."""
        try:
            async with self._bot:
                await self._bot.send_message(chat_id=self._chat_id, text=text)
        except TelegramError as e:
            logger.error(f"Could not send alert: {e}")
            return False
        return True

    async def report_failure(self, what: str, e: Exception) -> bool:
        return await self.send(f"⚠️ {what}: {classify_error(e)}")
