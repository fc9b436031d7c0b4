# src/xp_engine/cli/analytics.py

"""CLI commands over batches of historical metrics."""

import click
from rich.table import Table

from ..data.loader import RecordLoader
from .common import build_engine, console, load_or_fail, print_json

samples_option = click.option(
    "--samples-file",
    required=True,
    help="Path to a JSON list of performance metrics records, oldest first.",
    type=click.Path(exists=True, dir_okay=False),
)


@click.command()
@samples_option
@click.option("--period", default="month", help="Label for the trend period.")
@click.option("--json", "as_json", is_flag=True, help="Print the raw result as JSON.")
def analytics_command(samples_file: str, period: str, as_json: bool):
    """Summarises averages, distribution, trends and outliers."""
    engine = build_engine()
    samples = load_or_fail(RecordLoader.load_samples, samples_file)
    analytics = engine.performance.get_performance_analytics(samples, period)

    if as_json:
        print_json(analytics)
        return

    if not samples:
        console.print("[yellow]No samples to analyse.[/yellow]")
        return

    table = Table(
        title=f"Performance Analytics ({len(samples)} samples)",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Dimension", style="cyan", width=24)
    table.add_column("Average", style="green", width=10)
    table.add_column("Trend", width=12)
    table.add_column("Rate", style="dim", width=10)

    trends = {t.metric: t for t in analytics.trends}
    for dimension, average in analytics.average_scores.items():
        trend = trends[dimension]
        table.add_row(dimension, f"{average}", trend.direction.value, f"{trend.rate:+g}")
    console.print(table)

    for tier, share in analytics.score_distribution.items():
        console.print(f"{tier}: {share * 100:.0f}%")
    for outlier in analytics.outliers:
        console.print(
            f"[yellow]Sample {outlier.sample_index + 1} {outlier.metric}="
            f"{outlier.value}: {outlier.context}[/yellow]"
        )


@click.command()
@samples_option
@click.option(
    "--context-file",
    default=None,
    help="Optional JSON file with the scoring context to optimise for.",
    type=click.Path(exists=True, dir_okay=False),
)
@click.option("--json", "as_json", is_flag=True, help="Print the raw result as JSON.")
def optimize_command(samples_file: str, context_file: str, as_json: bool):
    """Suggests a weight vector from historical samples."""
    engine = build_engine()
    samples = load_or_fail(RecordLoader.load_samples, samples_file)
    context = load_or_fail(RecordLoader.load_context, context_file) if context_file else None
    result = engine.performance.optimize_weights(context, samples)

    if as_json:
        print_json(result)
        return

    table = Table(title="Weight Optimization", show_header=True, header_style="bold magenta")
    table.add_column("Dimension", style="cyan", width=24)
    table.add_column("Current", width=10)
    table.add_column("Suggested", style="green", width=10)

    suggested = result.suggested_weights.as_dict()
    for dimension, weight in result.current_weights.as_dict().items():
        table.add_row(dimension, f"{weight:.3f}", f"{suggested[dimension]:.3f}")
    console.print(table)

    for line in result.reasoning:
        console.print(f"- {line}")
    console.print(
        f"Expected improvement: {result.expected_improvement:+.2f} points, "
        f"confidence {result.confidence_score:.0f}%"
    )
