"""Sync, push and delete commands."""

import asyncio
import sys
import click

from rich.table import Table

from . import cli
from .shared import KIND_CHOICE, console, open_synchronizer, require_kind
from gecko.media import ChannelKind
from gecko.media.errors import MediaSyncError


def _report_table(reports) -> Table:
    table = Table(title="Sync result")
    table.add_column("Channel", style="bold")
    for column in ("Remote", "Local", "Created", "Updated", "Unchanged", "Missing", "Removed"):
        table.add_column(column, justify="right")
    for report in reports:
        table.add_row(
            str(report.kind),
            str(report.remote),
            str(report.local),
            str(len(report.created)),
            str(len(report.updated)),
            str(len(report.unchanged)),
            str(len(report.missing)),
            str(report.removed),
        )
    return table


@cli.command()
@click.option("--kind", type=KIND_CHOICE, default=None, help="Only sync this channel kind")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def sync(kind, debug):
    """Run one sync pass now."""
    from gecko.main import setup_logging

    setup_logging(debug=debug)

    async def _sync():
        async with open_synchronizer() as synchronizer:
            kinds = [ChannelKind(kind)] if kind else synchronizer.kinds
            for k in kinds:
                require_kind(synchronizer, k)
            reports = []
            failed = False
            for k in kinds:
                try:
                    reports.append(await synchronizer.sync(k))
                except MediaSyncError as e:
                    console.print(f"[red]{k} sync failed: {e}[/red]")
                    failed = True
            if reports:
                console.print(_report_table(reports))
                for report in reports:
                    if report.missing:
                        console.print(
                            f"[yellow]{report.kind}: missing locally (not created): "
                            f"{', '.join(str(i) for i in report.missing)}[/yellow]"
                        )
            return failed

    if asyncio.run(_sync()):
        sys.exit(1)


@cli.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("post_id", type=int)
def push(kind, post_id):
    """Post or update one website post (KIND: news or events)."""
    async def _push():
        async with open_synchronizer() as synchronizer:
            k = ChannelKind(kind)
            require_kind(synchronizer, k)
            await synchronizer.refresh_index(k)
            return await synchronizer.push(k, post_id)

    try:
        ok = asyncio.run(_push())
    except MediaSyncError as e:
        console.print(f"[red]Push failed: {e}[/red]")
        sys.exit(1)

    if not ok:
        console.print(f"[yellow]{kind} post {post_id} is not published on the first feed page.[/yellow]")
        sys.exit(1)
    console.print(f"[green]✓ {kind} post {post_id} is up to date on Discord.[/green]")


@cli.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("post_id", type=int)
@click.confirmation_option(prompt="Delete this post from Discord?")
def delete(kind, post_id):
    """Delete one synchronized post (KIND: news or events)."""
    async def _delete():
        async with open_synchronizer() as synchronizer:
            k = ChannelKind(kind)
            require_kind(synchronizer, k)
            await synchronizer.refresh_index(k)
            await synchronizer.delete_post(k, post_id)

    try:
        asyncio.run(_delete())
    except MediaSyncError as e:
        console.print(f"[red]Delete failed: {e}[/red]")
        sys.exit(1)
    console.print(f"[green]✓ Deleted {kind} post {post_id}.[/green]")
