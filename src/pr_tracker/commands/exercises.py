"""Exercise management commands."""

import click

from ..errors import PRTrackerError
from ..models import BarType, ExerciseCategory, ExerciseDraft, MeasurementUnit
from ..utils import bar_weight, plates_weight_for
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

CATEGORY_CHOICES = click.Choice([c.value for c in ExerciseCategory])
UNIT_CHOICES = click.Choice([u.value for u in MeasurementUnit])
BAR_CHOICES = click.Choice([b.value for b in BarType])


@click.group()
def exercise():
    """Manage tracked exercises."""
    pass


@exercise.command("list")
@click.pass_context
@async_command
async def list_exercises(ctx: click.Context):
    """List all exercises with their current PR."""
    ensure_initialized(ctx)

    async with build_engine() as engine:
        exercises = engine.exercises

    if not exercises:
        echo_info("No exercises yet. Add one with 'pr-tracker exercise add'.")
        return

    rows = []
    for ex in sorted(exercises, key=lambda e: e.name.lower()):
        bar = ""
        if ex.unit.is_weight and ex.bar_type and ex.bar_type != BarType.NONE:
            bar = f"{bar_weight(ex.bar_type, ex.unit):g} {ex.unit.value}"
        rows.append([ex.id[:8], ex.name, ex.category.value, ex.get_display_pr(), bar])

    click.echo(format_table(["ID", "Name", "Category", "PR", "Bar"], rows))


@exercise.command("add")
@click.argument("name")
@click.option("--category", "-c", type=CATEGORY_CHOICES, default="barbell", help="Exercise category")
@click.option("--unit", "-u", type=UNIT_CHOICES, help="Measurement unit (default: preference)")
@click.option("--bar", "-b", type=BAR_CHOICES, help="Bar type for barbell exercises")
@click.option("--pr", "initial_pr", type=float, help="Current best, stored on the exercise")
@click.option("--notes", help="Free-text notes")
@click.pass_context
@async_command
async def add(
    ctx: click.Context,
    name: str,
    category: str,
    unit: str | None,
    bar: str | None,
    initial_pr: float | None,
    notes: str | None,
):
    """Add a new exercise.

    The initial PR is stored on the exercise itself; history records are
    created when you log a PR later.

    Examples:
        pr-tracker exercise add "Back Squat" --category barbell --pr 315
        pr-tracker exercise add "Pull Up" --category bodyweight --unit reps
    """
    ensure_initialized(ctx)

    if initial_pr is not None and initial_pr <= 0:
        echo_error("The PR must be a number greater than 0")
        ctx.exit(1)

    async with build_engine() as engine:
        prefs = engine.preferences
        unit_value = MeasurementUnit(unit or prefs.default_unit.value)
        bar_type = None
        if category == ExerciseCategory.BARBELL.value:
            bar_type = BarType(bar or prefs.default_bar_type.value)
        elif bar:
            bar_type = BarType.NONE

        draft = ExerciseDraft(
            name=name,
            category=ExerciseCategory(category),
            unit=unit_value,
            bar_type=bar_type,
            current_pr=initial_pr,
            current_pr_plates=(
                plates_weight_for(initial_pr, bar_type, unit_value)
                if initial_pr is not None
                else None
            ),
            notes=notes,
        )
        try:
            created = await engine.add_exercise(draft)
        except PRTrackerError as e:
            echo_error(str(e))
            ctx.exit(1)

    echo_success(f"Added '{created.name}' (ID: {created.id[:8]})")


@exercise.command("edit")
@click.argument("ref")
@click.option("--name", help="New name")
@click.option("--category", "-c", type=CATEGORY_CHOICES, help="New category")
@click.option("--unit", "-u", type=UNIT_CHOICES, help="New unit")
@click.option("--bar", "-b", type=BAR_CHOICES, help="New bar type")
@click.option("--pr", "new_pr", type=float, help="New PR value (logged to history)")
@click.option("--notes", help="New notes")
@click.pass_context
@async_command
async def edit(
    ctx: click.Context,
    ref: str,
    name: str | None,
    category: str | None,
    unit: str | None,
    bar: str | None,
    new_pr: float | None,
    notes: str | None,
):
    """Edit an exercise by ID or name.

    Passing --pr with a value different from the current PR logs a new
    history record for it.
    """
    ensure_initialized(ctx)

    if new_pr is not None and new_pr <= 0:
        echo_error("The PR must be a number greater than 0")
        ctx.exit(1)

    changes = {
        key: value
        for key, value in {
            "name": name,
            "category": category,
            "unit": unit,
            "bar_type": bar,
            "notes": notes,
        }.items()
        if value is not None
    }

    async with build_engine() as engine:
        current = resolve_exercise(engine, ref)
        if current is None:
            echo_error(f"Exercise '{ref}' not found")
            ctx.exit(1)

        try:
            updated = current
            if changes:
                updated = await engine.update_exercise(current.id, changes)
            if new_pr is not None and new_pr != updated.current_pr:
                await engine.add_pr_record(
                    {
                        "exerciseId": updated.id,
                        "value": new_pr,
                        "platesWeight": plates_weight_for(new_pr, updated.bar_type, updated.unit),
                        "barType": updated.bar_type.value if updated.bar_type else None,
                    }
                )
        except PRTrackerError as e:
            echo_error(str(e))
            ctx.exit(1)

    echo_success(f"Updated '{updated.name}'")


@exercise.command("delete")
@click.argument("ref")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx: click.Context, ref: str, yes: bool):
    """Delete an exercise and its whole PR history."""
    ensure_initialized(ctx)

    async with build_engine() as engine:
        target = resolve_exercise(engine, ref)
        if target is None:
            echo_error(f"Exercise '{ref}' not found")
            ctx.exit(1)

        history = len(engine.get_exercise_history(target.id))
        if not yes and not click.confirm(
            f"Delete '{target.name}'? Its {history} PR records will be lost."
        ):
            echo_info("Cancelled")
            return

        try:
            await engine.delete_exercise(target.id)
        except PRTrackerError as e:
            echo_error(str(e))
            ctx.exit(1)

    echo_success(f"Deleted '{target.name}'")
