"""Plate calculator command."""

import click

from ..models import BarType, WeightUnit
from ..utils import bar_weight, plate_breakdown
from .base import echo_warning


@click.command()
@click.argument("total", type=float)
@click.option(
    "--bar",
    "-b",
    type=click.Choice([b.value for b in BarType]),
    default="standard",
    help="Bar type",
)
@click.option(
    "--unit",
    "-u",
    type=click.Choice([u.value for u in WeightUnit]),
    default="lbs",
    help="Weight unit",
)
def plates(total: float, bar: str, unit: str):
    """Show which plates to load on each side for a total weight.

    Example:
        pr-tracker plates 225 --bar standard --unit lbs
    """
    result = plate_breakdown(total, bar_weight(bar, unit), unit)

    if result.plate_weight < 0:
        echo_warning(f"{total:g}{unit} is lighter than the bar ({result.bar_weight:g}{unit})")
        return

    click.echo(f"Total: {result.total_weight:g}{unit}")
    click.echo(f"Bar:   {result.bar_weight:g}{unit}")
    click.echo(f"Plates: {result.plate_weight:g}{unit} ({result.weight_per_side:g}{unit} per side)")
    click.echo()
    if not result.plates_per_side:
        click.echo("No plates needed.")
        return
    click.echo("Per side:")
    for plate, count in result.plates_per_side.items():
        click.echo(f"  {count} x {plate}{unit}")

    loaded = sum(float(p) * c for p, c in result.plates_per_side.items()) * 2
    if abs(loaded - result.plate_weight) >= 0.01:
        echo_warning(
            f"Closest loadable weight is {result.bar_weight + loaded:g}{unit}"
        )
