"""Database management commands."""

import asyncio

import click

from . import cli
from .shared import _open_db, _schema_path, console


@cli.group()
def db():
    """Database management commands."""
    pass


@db.command("init")
def db_init():
    """Create the mapping tables (idempotent)."""
    async def _init():
        from disclack.db.connection import close_db, get_pool

        await _open_db()
        with open(_schema_path()) as f:
            schema = f.read()

        async with get_pool().acquire() as conn:
            await conn.execute(schema)

        console.print("[green]✓ Mapping schema initialized[/green]")
        await close_db()

    asyncio.run(_init())


@db.command("reset")
@click.confirmation_option(prompt="This will DELETE ALL user links and channel connections. Are you sure?")
def db_reset():
    """Drop and re-create the mapping tables."""
    async def _reset():
        from disclack.db.connection import close_db, get_pool

        await _open_db()
        async with get_pool().acquire() as conn:
            await conn.execute("""
                DROP TABLE IF EXISTS mappings CASCADE;
                DROP TABLE IF EXISTS users CASCADE;
            """)
        console.print("[yellow]Tables dropped.[/yellow]")

        with open(_schema_path()) as f:
            schema = f.read()
        async with get_pool().acquire() as conn:
            await conn.execute(schema)

        console.print("[green]✓ Mapping schema re-initialized[/green]")
        await close_db()

    asyncio.run(_reset())
