"""GECkO — Main entry point."""

import asyncio
import logging
import os
from typing import Optional

from .alerts import AlertSender
from .clients import DiscordClient, GecoClient
from .config import GeckoSettings, load_settings
from .media import MediaSynchronizer
from .scheduler import Scheduler

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_log_file = os.path.expanduser("~/gecko.log")

logger = logging.getLogger("gecko")


def setup_logging(debug: bool = False):
    """Log to stderr and ~/gecko.log."""
    logging.basicConfig(
        level=logging.INFO,
        format=_log_format,
        handlers=[
            logging.StreamHandler(),                          # stderr (console)
            logging.FileHandler(_log_file, encoding="utf-8"), # ~/gecko.log
        ],
    )
    if debug:
        logger.setLevel(logging.DEBUG)


def create_clients(settings: GeckoSettings) -> tuple[GecoClient, DiscordClient]:
    geco = GecoClient(settings.geco_api_key or "", base_url=settings.geco_api_url)
    discord = DiscordClient(settings.discord_token or "", base_url=settings.discord_api_url)
    return geco, discord


def create_synchronizer(settings: GeckoSettings, geco: GecoClient, discord: DiscordClient) -> MediaSynchronizer:
    return MediaSynchronizer(
        feed=geco,
        discord=discord,
        channels=settings.channels(),
        site_url=settings.site_url,
        history_limit=settings.history_limit,
    )


def create_alerts(settings: GeckoSettings) -> Optional[AlertSender]:
    if not settings.alerts_enabled:
        return None
    return AlertSender(settings.telegram_bot_token, settings.telegram_alert_chat_id)


async def sync_round(synchronizer: MediaSynchronizer, alerts: Optional[AlertSender] = None) -> int:
    """Run one pass per channel kind. A failing kind doesn't stop the others.

    Returns:
        Number of failed passes
    """
    failures = 0
    for kind in synchronizer.kinds:
        try:
            await synchronizer.sync(kind)
        except Exception as e:
            failures += 1
            logger.error(f"{kind} sync failed: {type(e).__name__}: {e}", exc_info=True)
            if alerts:
                await alerts.report_failure(f"{kind} sync failed", e)
    return failures


async def run(settings: Optional[GeckoSettings] = None):
    """Main run loop."""
    settings = settings or load_settings()
    geco, discord = create_clients(settings)
    synchronizer = create_synchronizer(settings, geco, discord)
    alerts = create_alerts(settings)
    scheduler = None

    try:
        scheduler = Scheduler(
            on_tick=lambda: sync_round(synchronizer, alerts),
            interval=settings.sync_interval,
            cron=settings.sync_cron,
        )
        await scheduler.start()

        logger.info(f"GECkO is running for {', '.join(str(k) for k in synchronizer.kinds) or 'no channels'}. "
                    "Press Ctrl+C to stop.")
        await scheduler.wait()

    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    except Exception as e:
        logger.critical(f"Fatal error: {type(e).__name__}: {e}", exc_info=True)
    finally:
        if scheduler:
            await scheduler.stop()
        await geco.aclose()
        await discord.aclose()


def main():
    """Entry point."""
    setup_logging()
    asyncio.run(run())


if __name__ == "__main__":
    main()
