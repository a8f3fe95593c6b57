"""Sync file commands."""

from datetime import datetime

import click

from ..config import get_document_dir
from ..errors import PRTrackerError
from .base import (
    async_command,
    build_engine,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
)


@click.group()
def sync():
    """Sync data through a file in a cloud-drive folder.

    While a sync file is configured it is the authoritative copy of your
    data; move it into iCloud, Google Drive or similar to share it between
    devices.
    """
    pass


@sync.command("status")
@click.pass_context
@async_command
async def status(ctx: click.Context):
    """Show where data is currently stored."""
    ensure_initialized(ctx)

    async with build_engine() as engine:
        path = engine.preferences.sync_file_path
        exercises = len(engine.exercises)
        total = engine.total_prs

    if path:
        echo_info(f"Syncing with {path}")
    else:
        echo_info("Sync disabled; data is stored locally")
    click.echo(f"{exercises} exercises, {total} PRs")


@sync.command("create")
@click.pass_context
@async_command
async def create(ctx: click.Context):
    """Create a new sync file from the current data."""
    ensure_initialized(ctx)

    file_name = f"pr-tracker-sync-{datetime.now().strftime('%Y%m%d%H%M%S')}.json"
    target = str(get_document_dir() / file_name)

    async with build_engine() as engine:
        try:
            path = await engine.set_sync_file(target)
        except PRTrackerError as e:
            echo_error(f"Could not create the sync file: {e}")
            ctx.exit(1)

    echo_success(f"Sync file created: {path}")
    click.echo("Move or link it into a cloud-drive folder to sync between devices.")


@sync.command("enable")
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_context
@async_command
async def enable(ctx: click.Context, path: str):
    """Sync with an existing file.

    Files outside the app's document directory are copied in: their data is
    adopted and a private copy becomes the sync file. The original file is
    never modified.
    """
    ensure_initialized(ctx)

    async with build_engine() as engine:
        try:
            sync_path = await engine.set_sync_file(path)
        except PRTrackerError as e:
            echo_error(f"Could not set up the sync file: {e}")
            ctx.exit(1)
        exercises = len(engine.exercises)
        total = engine.total_prs

    echo_success(f"Sync file configured: {sync_path}")
    click.echo(f"{exercises} exercises, {total} PRs")


@sync.command("disable")
@click.pass_context
@async_command
async def disable(ctx: click.Context):
    """Stop syncing and store data locally again.

    The sync file is left untouched on disk.
    """
    ensure_initialized(ctx)

    async with build_engine() as engine:
        try:
            await engine.set_sync_file(None)
        except PRTrackerError as e:
            echo_error(f"Could not disable sync: {e}")
            ctx.exit(1)

    echo_success("Sync disabled. Data is now stored locally.")
