"""Status command."""

import asyncio
import click

from . import cli
from .shared import console

from rich.table import Table


async def _scan_channels(settings) -> dict:
    """Read each channel's history without changing anything.

    Returns:
        {kind: (post_ids, foreign_message_count)}
    """
    from gecko.main import create_clients
    from gecko.media import get_post_id, post_url_pattern

    pattern = post_url_pattern(settings.site_url)
    geco, discord = create_clients(settings)
    try:
        result = {}
        for kind, channel_id in settings.channels().items():
            history = await discord.get_history(channel_id, settings.history_limit)
            ids = [get_post_id(m, pattern) for m in history]
            result[kind] = (sorted(i for i in ids if i is not None), sum(1 for i in ids if i is None))
        return result
    finally:
        await geco.aclose()
        await discord.aclose()


@cli.command()
@click.option("--offline", is_flag=True, help="Only show configuration, don't read Discord")
def status(offline):
    """Show GECkO status."""
    from gecko import __version__ as gecko_version
    from gecko.config import load_settings

    settings = load_settings()

    table = Table(title=f"GECkO Status v{gecko_version}", show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Version", gecko_version)
    table.add_row("Website", settings.site_url)
    table.add_row("Feed API", settings.geco_api_url)
    table.add_row("Feed API key", "[green]set[/green]" if settings.geco_api_key else "[red]missing[/red]")
    table.add_row("Discord token", "[green]set[/green]" if settings.discord_token else "[red]missing[/red]")
    table.add_row("News channel", settings.news_channel_id or "[dim]not configured[/dim]")
    table.add_row("Events channel", settings.events_channel_id or "[dim]not configured[/dim]")
    table.add_row("Schedule", f"cron {settings.sync_cron}" if settings.sync_cron else f"every {settings.sync_interval}s")
    table.add_row("Alerts", "[green]Telegram[/green]" if settings.alerts_enabled else "[dim]log only[/dim]")

    if not offline and settings.channels():
        try:
            for kind, (ids, foreign) in asyncio.run(_scan_channels(settings)).items():
                shown = " ".join(str(i) for i in ids[-20:])
                if len(ids) > 20:
                    shown = f"… {shown}"
                table.add_row(f"{str(kind).capitalize()} posts", f"{len(ids)} [dim]{shown}[/dim]")
                if foreign:
                    table.add_row("", f"[yellow]{foreign} other message(s), removed on next sync[/yellow]")
        except Exception as e:
            table.add_row("Discord", f"[red]Error: {e}[/red]")

    console.print(table)
