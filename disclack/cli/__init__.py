"""Disclack CLI — mapping administration and conversion tools."""

import click
from disclack import __version__
from .shared import console


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="disclack")
@click.pass_context
def cli(ctx):
    """Disclack — Slack ⇄ Discord bridge"""
    if ctx.invoked_subcommand is None:
        _show_help()


def _show_help():
    """Show all available commands grouped by category."""
    console.print(f"[bold]Disclack v{__version__}[/bold] — Slack ⇄ Discord bridge\n")

    groups = {
        "Database": [
            ("db init", "Create the mapping tables"),
            ("db reset", "Drop and re-create the mapping tables"),
        ],
        "Mappings": [
            ("link", "Link a Slack user with a Discord user"),
            ("unlink", "Remove a user link"),
            ("connect", "Connect a Discord channel with a Slack channel"),
            ("disconnect", "Disconnect a Discord channel"),
            ("mappings", "List linked users and connected channels"),
        ],
        "Conversion": [
            ("convert slack", "Render a Slack message/blocks JSON file as Discord markdown"),
            ("convert discord", "Rewrite Discord text with Slack mentions"),
        ],
    }

    for category, commands in groups.items():
        console.print(f"  [bold cyan]{category}[/bold cyan]")
        for name, desc in commands:
            console.print(f"    [bold]disclack {name:16s}[/bold] {desc}")
        console.print()

    console.print("[dim]Run 'disclack <command> --help' for details on a specific command.[/dim]")


# Import all command modules (registers commands onto cli group)
from . import cmd_db  # noqa: E402, F401
from . import cmd_mappings  # noqa: E402, F401
from . import cmd_convert  # noqa: E402, F401


@cli.command(name="help", hidden=True)
def help_cmd():
    """Show all available commands."""
    _show_help()


def main():
    """CLI entry point."""
    import sys
    try:
        cli(standalone_mode=False)
    except click.UsageError as e:
        if e.ctx:
            click.echo(e.ctx.command.get_usage(e.ctx), err=True)
        click.echo("Try 'disclack help' for help.\n", err=True)
        click.echo(f"Error: {e.format_message()}", err=True)
        sys.exit(2)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.exceptions.Exit as e:
        sys.exit(e.code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
