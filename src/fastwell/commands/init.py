"""Initialize project command."""

import click

from ..db import init_db
from .base import async_command, echo_info, echo_success, get_settings


@click.command()
@click.pass_context
@async_command
async def init(ctx: click.Context):
    """Initialize the fastwell data directory and database.

    Creates the data directory and the SQLite document store. Running it
    again is safe; existing data is kept.
    """
    settings = get_settings(ctx)

    echo_info(f"Initializing fastwell in {settings.data_dir}")
    settings.data_dir.mkdir(parents=True, exist_ok=True)

    await init_db(settings.db_path)
    echo_success("Database initialized")

    click.echo()
    click.echo("fastwell is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Create an account:")
    click.echo("     fastwell auth signup --email you@example.com")
    click.echo()
    click.echo("  2. Start your first fast:")
    click.echo("     fastwell fast start --goal 16")
