# src/xp_engine/cli/xp.py

"""CLI commands for XP calculation and reference ranges."""

import click
from rich.table import Table

from ..data.loader import RecordLoader
from .common import build_engine, console, load_or_fail, print_json


@click.command()
@click.option(
    "--activity-file",
    required=True,
    help="Path to a JSON activity record (type, scenarioDifficulty, performanceMetrics).",
    type=click.Path(exists=True, dir_okay=False),
)
@click.option("--json", "as_json", is_flag=True, help="Print the raw result as JSON.")
def xp_command(activity_file: str, as_json: bool):
    """Calculates the XP awarded for one completed activity."""
    engine = build_engine()
    activity = load_or_fail(RecordLoader.load_activity, activity_file)

    validation = engine.xp.validate_activity_data(activity)
    if not validation.valid:
        for error in validation.errors:
            console.print(f"[red]{error}[/red]")
        raise click.ClickException("Activity data is invalid")

    result = load_or_fail(engine.xp.calculate_xp, activity)

    if as_json:
        print_json(result)
        return

    for line in result.explanations:
        console.print(line)
    console.print(f"[bold green]Total: {result.total_xp} XP[/bold green]")


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print the ranges as JSON.")
def ranges_command(as_json: bool):
    """Shows the minimum, typical and maximum XP per activity type."""
    engine = build_engine()
    ranges = engine.xp.get_xp_ranges()

    if as_json:
        print_json({name: r.model_dump() for name, r in ranges.items()})
        return

    table = Table(title="XP Ranges", show_header=True, header_style="bold magenta")
    table.add_column("Activity", style="cyan", width=24)
    table.add_column("Min", width=6)
    table.add_column("Typical", width=8)
    table.add_column("Max", width=6)
    for name, xp_range in ranges.items():
        table.add_row(
            name.replace("_", " ").title(),
            str(xp_range.min),
            str(xp_range.typical),
            str(xp_range.max),
        )
    console.print(table)
