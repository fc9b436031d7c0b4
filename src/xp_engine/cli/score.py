# src/xp_engine/cli/score.py

"""CLI command for scoring a single set of performance metrics."""

import click
from rich.table import Table

from ..data.loader import RecordLoader
from .common import build_engine, console, load_or_fail, print_json


@click.command()
@click.option(
    "--metrics-file",
    required=True,
    help="Path to a JSON file with one performance metrics record.",
    type=click.Path(exists=True, dir_okay=False),
)
@click.option(
    "--context-file",
    default=None,
    help="Optional JSON file with the scoring context (activityType, difficulty, ...).",
    type=click.Path(exists=True, dir_okay=False),
)
@click.option("--json", "as_json", is_flag=True, help="Print the raw result as JSON.")
def score_command(metrics_file: str, context_file: str, as_json: bool):
    """Calculates and displays a weighted performance score."""
    engine = build_engine()
    metrics = load_or_fail(RecordLoader.load_metrics, metrics_file)
    context = load_or_fail(RecordLoader.load_context, context_file) if context_file else None

    validation = engine.performance.validate_performance_metrics(metrics)
    result = engine.performance.calculate_performance_score(metrics, context)

    if as_json:
        print_json(result)
        return

    for error in validation.errors:
        console.print(f"[yellow]Warning: {error}[/yellow]")

    table = Table(
        title="Performance Score", show_header=True, header_style="bold magenta"
    )
    table.add_column("Dimension", style="cyan", width=24)
    table.add_column("Score", style="green", width=10)
    table.add_column("Weight", style="dim", width=10)
    table.add_column("Contribution", style="green", width=14)

    weights = result.applied_weights.as_dict()
    for dimension, score in result.breakdown.base_scores.items():
        table.add_row(
            dimension,
            f"{score}",
            f"{weights[dimension] * 100:.1f}%",
            f"{result.weighted_scores[dimension]}",
        )

    table.add_row("---", "---", "---", "---")
    for adjustment in result.breakdown.adjustments:
        if adjustment.applied:
            table.add_row(adjustment.type.value, "", "", f"{adjustment.value:+g}")
    table.add_row(
        "Overall Score", f"[bold]{result.overall_score}/100[/bold]", "100%", ""
    )

    console.print(table)
    console.print(
        f"Tier: [bold]{result.tier.badge} {result.tier.name}[/bold] "
        f"(x{result.tier.multiplier})"
    )
    for rule in result.context_rules_applied:
        console.print(f"[dim]Context rule applied: {rule}[/dim]")
    for recommendation in result.recommendations:
        console.print(f"- {recommendation}")
