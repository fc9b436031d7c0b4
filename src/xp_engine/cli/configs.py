# src/xp_engine/cli/configs.py

"""CLI command listing the active weight configurations."""

import click
from rich.table import Table

from .common import build_engine, console, print_json


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print the configurations as JSON.")
def configs_command(as_json: bool):
    """Lists active weight configurations and their context rules."""
    engine = build_engine()
    configs = engine.performance.get_weight_configurations()

    if as_json:
        print_json([c.model_dump(mode="json", by_alias=True) for c in configs])
        return

    table = Table(title="Weight Configurations", show_header=True, header_style="bold magenta")
    table.add_column("Id", style="cyan")
    table.add_column("Name")
    table.add_column("Priority", width=8)
    table.add_column("Weights", style="dim")
    table.add_column("Rules", width=6)

    for config in sorted(configs, key=lambda c: c.priority, reverse=True):
        weights = ", ".join(
            f"{name}={weight:g}" for name, weight in config.weights.as_dict().items()
        )
        table.add_row(
            config.id, config.name, str(config.priority), weights, str(len(config.context_rules))
        )
    console.print(table)
