"""GECkO CLI — command line interface."""

import click
from gecko import __version__
from .shared import console


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="gecko")
@click.pass_context
def cli(ctx):
    """GECkO — GECo website news and events mirrored to Discord"""
    if ctx.invoked_subcommand is None:
        _show_help()


def _show_help():
    """Show all available commands grouped by category."""
    console.print(f"[bold]GECkO v{__version__}[/bold] — website news and events mirrored to Discord\n")

    groups = {
        "Service": [
            ("start", "Run scheduled sync passes until stopped"),
            ("status", "Show configuration and synchronized posts"),
        ],
        "Sync": [
            ("sync", "Run one sync pass now (--kind to limit)"),
            ("push KIND ID", "Post or update a single website post"),
            ("delete KIND ID", "Delete a single synchronized post"),
        ],
    }

    for category, commands in groups.items():
        console.print(f"  [bold cyan]{category}[/bold cyan]")
        for name, desc in commands:
            console.print(f"    [bold]gecko {name:16s}[/bold] {desc}")
        console.print()

    console.print("[dim]Run 'gecko <command> --help' for details on a specific command.[/dim]")


# Import all command modules (registers commands onto cli group)
from . import cmd_start  # noqa: E402, F401
from . import cmd_status  # noqa: E402, F401
from . import cmd_sync  # noqa: E402, F401


@cli.command(name="help", hidden=True)
def help_cmd():
    """Show all available commands."""
    _show_help()
