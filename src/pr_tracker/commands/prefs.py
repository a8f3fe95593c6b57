"""Preference commands."""

import click

from ..errors import PRTrackerError
from ..models import DefaultBarType, ThemeColor, ThemeMode, WeightUnit
from .base import async_command, build_engine, echo_error, echo_success, ensure_initialized


@click.group()
def prefs():
    """View and change preferences."""
    pass


@prefs.command("show")
@click.pass_context
@async_command
async def show(ctx: click.Context):
    """Show current preferences."""
    ensure_initialized(ctx)

    async with build_engine() as engine:
        current = engine.preferences

    click.echo(f"Default unit:     {current.default_unit.value}")
    click.echo(f"Default bar type: {current.default_bar_type.value}")
    click.echo(f"Theme:            {current.theme_color.value} / {current.theme_mode.value}")
    click.echo(f"Sync file:        {current.sync_file_path or '(local storage only)'}")


@prefs.command("set")
@click.option("--unit", type=click.Choice([u.value for u in WeightUnit]), help="Default unit")
@click.option("--bar", type=click.Choice([b.value for b in DefaultBarType]), help="Default bar type")
@click.option("--color", type=click.Choice([c.value for c in ThemeColor]), help="Theme color")
@click.option("--mode", type=click.Choice([m.value for m in ThemeMode]), help="Theme mode")
@click.pass_context
@async_command
async def set_prefs(
    ctx: click.Context,
    unit: str | None,
    bar: str | None,
    color: str | None,
    mode: str | None,
):
    """Change one or more preferences."""
    ensure_initialized(ctx)

    changes = {
        key: value
        for key, value in {
            "default_unit": unit,
            "default_bar_type": bar,
            "theme_color": color,
            "theme_mode": mode,
        }.items()
        if value is not None
    }
    if not changes:
        echo_error("Nothing to change. See 'pr-tracker prefs set --help'.")
        ctx.exit(1)

    async with build_engine() as engine:
        try:
            await engine.update_preferences(changes)
        except PRTrackerError as e:
            echo_error(str(e))
            ctx.exit(1)

    echo_success("Preferences saved")
