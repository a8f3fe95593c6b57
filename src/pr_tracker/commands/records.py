"""PR logging and history commands."""

import click

from ..errors import PRTrackerError
from ..models import BarType
from ..utils import plates_weight_for
from .base import (
    async_command,
    build_engine,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    resolve_exercise,
)


@click.group()
def pr():
    """Log personal records and browse history."""
    pass


@pr.command("log")
@click.argument("ref")
@click.argument("value", type=float)
@click.option("--plates", type=float, help="Plate-only weight (default: value minus bar)")
@click.option("--date", "date_", help="ISO-8601 timestamp (default: now)")
@click.option("--notes", help="Free-text note")
@click.pass_context
@async_command
async def log(
    ctx: click.Context,
    ref: str,
    value: float,
    plates: float | None,
    date_: str | None,
    notes: str | None,
):
    """Log a PR attempt for an exercise (by ID or name).

    Examples:
        pr-tracker pr log "Bench Press" 235
        pr-tracker pr log "Pull Up" 15 --notes "strict"
    """
    ensure_initialized(ctx)

    async with build_engine() as engine:
        target = resolve_exercise(engine, ref)
        if target is None:
            echo_error(f"Exercise '{ref}' not found")
            ctx.exit(1)

        previous = target.current_pr
        if plates is None:
            plates = plates_weight_for(value, target.bar_type, target.unit)
        try:
            await engine.add_pr_record(
                {
                    "exerciseId": target.id,
                    "value": value,
                    "platesWeight": plates,
                    "barType": target.bar_type.value
                    if target.bar_type and target.bar_type != BarType.NONE
                    else None,
                    "date": date_,
                    "notes": notes,
                }
            )
        except PRTrackerError as e:
            echo_error(str(e))
            ctx.exit(1)
        updated = engine.get_exercise(target.id)

    if previous is None or value > previous:
        echo_success(f"New PR for {updated.name}: {updated.get_display_pr()}")
    else:
        echo_info(f"Logged {value:g} {target.unit.value}; PR stays at {updated.get_display_pr()}")


@pr.command("history")
@click.argument("ref")
@click.option("--limit", "-n", type=int, default=0, help="Show only the newest N records")
@click.pass_context
@async_command
async def history(ctx: click.Context, ref: str, limit: int):
    """Show the PR history of an exercise, newest first."""
    ensure_initialized(ctx)

    async with build_engine() as engine:
        target = resolve_exercise(engine, ref)
        if target is None:
            echo_error(f"Exercise '{ref}' not found")
            ctx.exit(1)
        records = engine.get_exercise_history(target.id)

    click.echo()
    click.echo(click.style(f"{target.name}: {target.get_display_pr()}", bold=True))
    click.echo("=" * 50)

    if not records:
        echo_info("No PR records yet.")
        return

    if limit > 0:
        records = records[:limit]

    rows = [
        [
            pr.date[:10],
            f"{pr.value:g} {target.unit.value}",
            f"{pr.plates_weight:g}" if pr.plates_weight is not None else "-",
            pr.notes or "",
        ]
        for pr in records
    ]
    click.echo(format_table(["Date", "Value", "Plates", "Notes"], rows))
