"""Export data command."""

import click

from ..errors import PRTrackerError
from .base import (
    async_command,
    build_engine,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
)


@click.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Write to this file (default: dated backup in the document directory)",
)
@click.option(
    "--stdout",
    "to_stdout",
    is_flag=True,
    help="Print the snapshot instead of writing a file",
)
@click.option(
    "--clipboard",
    "-c",
    is_flag=True,
    help="Copy the snapshot to the clipboard",
)
@click.pass_context
@async_command
async def export(ctx, output: str | None, to_stdout: bool, clipboard: bool):
    """Export all exercises, PRs and preferences as a JSON backup.

    Examples:
        # Dated backup file in the document directory
        pr-tracker export

        # Choose the file
        pr-tracker export -o ~/Dropbox/pr-backup.json

        # Copy to clipboard
        pr-tracker export --clipboard
    """
    ensure_initialized(ctx)

    async with build_engine() as engine:
        if to_stdout or clipboard:
            content = engine.export_snapshot().decode("utf-8")
        else:
            try:
                path = await engine.export_to_file(output)
            except PRTrackerError as e:
                echo_error(f"Could not export data: {e}")
                ctx.exit(1)
            echo_success(f"Exported {len(engine.exercises)} exercises and {engine.total_prs} PRs to {path}")
            return

    if clipboard:
        try:
            import pyperclip

            pyperclip.copy(content)
            echo_success("Copied to clipboard!")
            echo_info("Paste it into a .json file to keep as a backup")
        except ImportError:
            echo_error(
                "pyperclip not installed. Install with: pip install pr-tracker[clipboard]"
            )
            ctx.exit(1)
    else:
        click.echo(content)
