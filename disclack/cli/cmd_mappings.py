"""User link and channel connection commands."""

import asyncio

import click
from rich.table import Table

from . import cli
from .shared import _open_db, console


def _run(action):
    """Run a store action with the database open, reporting linking errors."""
    async def _wrapped():
        from disclack.db.connection import close_db
        from disclack.db.models import PostgresMappingStore
        from disclack.errors import InvalidIdentifierError, MappingConflictError

        await _open_db()
        try:
            await action(PostgresMappingStore())
        except (InvalidIdentifierError, MappingConflictError) as e:
            console.print(f"[red]✗ {e}[/red]")
            raise click.exceptions.Exit(1)
        finally:
            await close_db()

    asyncio.run(_wrapped())


@cli.command()
@click.argument("slack_user")
@click.argument("discord_user")
def link(slack_user, discord_user):
    """Link a Slack user (U...) with a Discord user id."""
    async def _link(store):
        from disclack.linking import link_user
        await link_user(store, slack_user, discord_user)
        console.print(f"[green]✓ Linked {slack_user} ⇄ {discord_user}[/green]")

    _run(_link)


@cli.command()
@click.argument("discord_user")
def unlink(discord_user):
    """Remove the link of a Discord user."""
    async def _unlink(store):
        from disclack.linking import unlink_user
        if await unlink_user(store, discord_user):
            console.print(f"[green]✓ Unlinked {discord_user}[/green]")
        else:
            console.print(f"[yellow]Discord user {discord_user} is not linked. Nothing to do.[/yellow]")

    _run(_unlink)


@cli.command()
@click.argument("discord_channel")
@click.argument("slack_channel")
@click.argument("discord_webhook")
def connect(discord_channel, slack_channel, discord_webhook):
    """Connect a Discord channel (and its relay webhook) with a Slack channel (C...)."""
    async def _connect(store):
        from disclack.linking import connect_channel
        await connect_channel(store, slack_channel, discord_channel, discord_webhook)
        console.print(f"[green]✓ Connected {discord_channel} ⇄ {slack_channel}[/green]")

    _run(_connect)


@cli.command()
@click.argument("discord_channel")
def disconnect(discord_channel):
    """Disconnect a Discord channel from Slack."""
    async def _disconnect(store):
        from disclack.linking import disconnect_channel
        if await disconnect_channel(store, discord_channel):
            console.print(f"[green]✓ Disconnected {discord_channel}[/green]")
        else:
            console.print(f"[yellow]Channel {discord_channel} is not connected to Slack.[/yellow]")

    _run(_disconnect)


@cli.command()
def mappings():
    """List linked users and connected channels."""
    async def _mappings(store):
        users = await store.list_users()
        table = Table(title="Linked users", show_header=True)
        table.add_column("Slack", style="bold")
        table.add_column("Discord")
        for u in users:
            table.add_row(u.slack_id, u.discord_id)
        console.print(table)

        channels = await store.list_mappings()
        table = Table(title="Connected channels", show_header=True)
        table.add_column("Slack", style="bold")
        table.add_column("Discord")
        table.add_column("Webhook", style="dim")
        for m in channels:
            table.add_row(m.slack_channel, m.discord_channel, m.discord_webhook)
        console.print(table)

    _run(_mappings)
