"""Shared utilities for Disclack CLI commands."""

import os

from rich.console import Console

console = Console()


def _schema_path() -> str:
    """Return the path of the bundled mapping-store schema."""
    return os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "db", "schema.sql")


async def _open_db():
    """Load settings, configure logging and open the pool. Returns the settings."""
    from disclack.config import load_settings
    from disclack.db.connection import init_db
    from disclack.log import setup_logging

    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)
    await init_db(settings.database_url)
    return settings
