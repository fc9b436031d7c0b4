"""Main entry point for the xp-engine CLI."""

import click

from .cli.analytics import analytics_command, optimize_command
from .cli.configs import configs_command
from .cli.score import score_command
from .cli.xp import ranges_command, xp_command


@click.group()
@click.version_option(package_name="xp-scoring-engine")
def main():
    """XP Scoring Engine - Score support activities and award XP."""
    pass


main.add_command(score_command, name="score")
main.add_command(xp_command, name="xp")
main.add_command(ranges_command, name="ranges")
main.add_command(analytics_command, name="analytics")
main.add_command(optimize_command, name="optimize")
main.add_command(configs_command, name="configs")


if __name__ == "__main__":
    main()
