"""Conversion commands: run content through the live resolvers."""

import asyncio
import json

import click
from rich.panel import Panel
from rich.text import Text

from . import cli
from .shared import _open_db, console


def _render(convert_with, title, style):
    """Convert with a live bridge, reporting lookup failures instead of a traceback."""
    async def _convert():
        from disclack.bridge import Bridge
        from disclack.db.connection import close_db
        from disclack.errors import DisclackError, classify_error

        settings = await _open_db()
        try:
            content = await convert_with(Bridge.from_settings(settings))
        except DisclackError as e:
            console.print(f"[red]✗ {classify_error(e)}[/red]")
            raise click.exceptions.Exit(1)
        finally:
            await close_db()
        console.print(Panel(Text(content or ""), title=title, style=style))

    asyncio.run(_convert())


@cli.group()
def convert():
    """Convert message content between platforms."""
    pass


@convert.command("slack")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def convert_slack(path):
    """Render a Slack message (or bare blocks array) JSON file as Discord markdown."""
    with open(path) as f:
        payload = json.load(f)
    message = {"blocks": payload} if isinstance(payload, list) else payload

    _render(lambda bridge: bridge.slack_to_discord.render_message(message), "Discord", "blue")


@convert.command("discord")
@click.argument("text")
def convert_discord(text):
    """Rewrite Discord markdown with Slack mention syntax."""
    _render(lambda bridge: bridge.discord_to_slack.render_text(text), "Slack", "green")
