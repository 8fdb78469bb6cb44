"""Shared utilities for GECkO CLI commands."""

import sys
from contextlib import asynccontextmanager

import click
from rich.console import Console

from gecko.media import ChannelKind

console = Console()

KIND_CHOICE = click.Choice([k.value for k in ChannelKind])


@asynccontextmanager
async def open_synchronizer():
    """Yield a MediaSynchronizer built from settings, closing its clients after."""
    from gecko.config import load_settings
    from gecko.main import create_clients, create_synchronizer

    settings = load_settings()
    if not settings.channels():
        console.print("[red]No channels configured. Set GECKO_NEWS_CHANNEL_ID and/or GECKO_EVENTS_CHANNEL_ID.[/red]")
        sys.exit(1)

    geco, discord = create_clients(settings)
    try:
        yield create_synchronizer(settings, geco, discord)
    finally:
        await geco.aclose()
        await discord.aclose()


def require_kind(synchronizer, kind: ChannelKind):
    """Exit with a message if the kind has no channel configured."""
    if kind not in synchronizer.kinds:
        console.print(f"[red]No Discord channel configured for {kind}.[/red]")
        sys.exit(1)
