# src/xp_engine/cli/common.py

"""Shared plumbing for the CLI commands."""

import json
from typing import Any, Callable

import click
from pydantic import BaseModel
from rich.console import Console

from ..config.settings import get_settings
from ..engine.service import Engine, create_engine
from ..utils.log import setup_logging

console = Console()


def build_engine() -> Engine:
    """Engine with the environment's settings and logging applied."""
    settings = get_settings()
    setup_logging(settings.log_level)
    return create_engine(settings=settings)


def load_or_fail(loader: Callable[..., Any], *args: Any) -> Any:
    """Runs a loader, turning file and data errors into clean CLI errors."""
    try:
        return loader(*args)
    except (OSError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


def print_json(model: Any) -> None:
    """Prints a model (or plain data) as camelCase JSON."""
    if isinstance(model, BaseModel):
        data = model.model_dump(mode="json", by_alias=True)
    else:
        data = model
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))
