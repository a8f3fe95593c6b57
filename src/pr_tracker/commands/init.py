"""Initialize project command."""

import click

from ..config import get_db_path, get_document_dir, get_settings
from ..storage import init_db
from .base import async_command, echo_info, echo_success


@click.command()
@async_command
async def init():
    """Initialize the pr-tracker data directory and database.

    Creates the data directory, the internal key-value database and the
    document directory used for sync files and backups.
    """
    settings = get_settings()
    db_path = get_db_path(settings)

    echo_info(f"Initializing pr-tracker in {db_path.parent}")

    await init_db(db_path)
    echo_success("Database initialized")

    document_dir = get_document_dir(settings)
    echo_success(f"Document directory ready: {document_dir}")

    click.echo()
    click.echo("pr-tracker is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Add an exercise:")
    click.echo('     pr-tracker exercise add "Bench Press" --category barbell --unit lbs')
    click.echo()
    click.echo("  2. Log a PR:")
    click.echo('     pr-tracker pr log "Bench Press" 225')
    click.echo()
    click.echo("  3. Sync across devices (optional):")
    click.echo("     pr-tracker sync create")
