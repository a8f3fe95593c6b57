"""CLI entry point for pr-tracker."""

import logging

import click

from . import __version__
from .commands import exercise, export, import_data, init, plates, pr, prefs, sync
from .config import get_settings


@click.group()
@click.version_option(version=__version__, prog_name="pr-tracker")
@click.option("--verbose", "-v", is_flag=True, help="Show storage and sync activity")
def main(verbose: bool):
    """pr-tracker: Track your personal records.

    Define exercises, log PR attempts and keep a running best per exercise.
    Data is stored locally, or in a sync file you can keep in a cloud-drive
    folder to share between devices.

    Example usage:

        # Initialize the data directory
        pr-tracker init

        # Add an exercise and log a PR
        pr-tracker exercise add "Deadlift" --category barbell
        pr-tracker pr log "Deadlift" 405

        # Back up and restore
        pr-tracker export -o backup.json
        pr-tracker import backup.json
    """
    level = logging.INFO if verbose else get_settings().log_level.upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# Register commands
main.add_command(init)
main.add_command(exercise)
main.add_command(pr)
main.add_command(prefs)
main.add_command(sync)
main.add_command(export)
main.add_command(import_data)
main.add_command(plates)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
