"""Import data command."""

import click
import questionary

from ..config import get_settings
from ..errors import ImportCancelledError, PRTrackerError
from ..services import CancellationToken
from .base import (
    async_command,
    build_engine,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
)


class PromptFilePicker:
    """Terminal file picker backed by a questionary path prompt.

    questionary returns None when the prompt is aborted, so cancellation is
    reported definitively.
    """

    reports_cancellation = True

    def __init__(self, message: str = "Backup file to import:"):
        self.message = message

    async def pick(self, token: CancellationToken) -> str | None:
        path = await questionary.path(
            self.message,
            validate=lambda p: bool(p.strip()) or "Enter a file path",
        ).ask_async()
        return path.strip() if path else None


@click.command(name="import")
@click.argument("path", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def import_data(ctx, path: str | None, yes: bool):
    """Import a JSON backup, replacing all exercises and PRs.

    Preferences from the backup are merged into yours; the sync file setting
    is never taken from a backup. Without PATH you are prompted for a file.

    Example:
        pr-tracker import pr-tracker-backup-2024-05-01.json
    """
    ensure_initialized(ctx)

    if not yes and not click.confirm(
        "Importing replaces all current exercises and PRs. Continue?"
    ):
        echo_info("Cancelled")
        return

    async with build_engine() as engine:
        try:
            if path:
                await engine.import_from_file(path)
            else:
                path = await engine.import_from_picker(
                    PromptFilePicker(),
                    fallback_timeout=get_settings().picker_timeout_seconds,
                )
        except ImportCancelledError:
            echo_warning("Import cancelled")
            return
        except PRTrackerError as e:
            echo_error(f"Could not import data: {e}")
            ctx.exit(1)

        echo_success(
            f"Imported {len(engine.exercises)} exercises and {engine.total_prs} PRs from {path}"
        )
