"""liquidlab CLI

Usage:
    liquidlab render pattern.liquid                 # render with ./patternlab-config.json
    liquidlab render pattern.liquid -c cfg.yaml     # use a specific config
    liquidlab render pattern.liquid -d data.json    # extra render data
    liquidlab partials pattern.liquid               # list partial references
    liquidlab meta -c cfg.json                      # spawn default _meta head/foot
    liquidlab --version
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from liquidlab import partials
from liquidlab._version import __version__
from liquidlab.config import PatternLabConfig
from liquidlab.engine import LiquidEngine
from liquidlab.exceptions import LiquidLabError

DEFAULT_CONFIG = "patternlab-config.json"

console = Console()

typer_app = typer.Typer(no_args_is_help=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the liquidlab CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level - engine setup
    - Debug (LIQUIDLAB_DEBUG=1): DEBUG level - search paths, sidecars, pipelines
    """
    if os.environ.get("LIQUIDLAB_DEBUG"):
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=bool(os.environ.get("LIQUIDLAB_DEBUG")),
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("liquidlab")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False


def exit_with_error(message: str, exit_code: int = 1) -> NoReturn:
    """Exit the program with an error message."""
    typer.secho(f"Error: {message}", err=True, fg=typer.colors.RED)
    sys.exit(exit_code)


def handle_error(error: Exception) -> NoReturn:
    """Handle and exit on liquidlab errors."""
    if isinstance(error, LiquidLabError):
        exit_with_error(str(error), error.exit_code)
    exit_with_error(f"Unexpected error: {error}")


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"liquidlab {__version__}")
        raise typer.Exit()


@typer_app.callback()
def main(
    version: bool = typer.Option(
        False,
        "-V",
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Liquid-style tags and partial matchers for pattern libraries."""


@typer_app.command()
def render(
    pattern: Path = typer.Argument(..., help="Template file to render."),
    config_path: Path = typer.Option(
        Path(DEFAULT_CONFIG), "-c", "--config", help="Pattern lab config file."
    ),
    data_path: Optional[Path] = typer.Option(
        None, "-d", "--data", help="JSON file with render data."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show engine logs."),
) -> None:
    """Render one pattern through a configured engine and print the HTML."""
    setup_logging(verbose)

    if not pattern.is_file():
        exit_with_error(f"File not found: {pattern}")

    try:
        config = PatternLabConfig.load(config_path)
        engine = LiquidEngine(config, root=config_path.resolve().parent)
        data = json.loads(data_path.read_text(encoding="utf-8")) if data_path else {}
    except Exception as exc:
        handle_error(exc)

    html = asyncio.run(engine.render_pattern(pattern.read_text(encoding="utf-8"), data))
    if html is None:
        exit_with_error(f"Failed to render {pattern}")
    typer.echo(html, nl=False)


@typer_app.command("partials")
def list_partials(
    pattern: Path = typer.Argument(..., help="Template file to scan."),
) -> None:
    """List the partial references found in a pattern."""
    if not pattern.is_file():
        exit_with_error(f"File not found: {pattern}")

    source = pattern.read_text(encoding="utf-8")
    with_modifiers = set(partials.find_partials_with_style_modifiers(source))
    with_parameters = set(partials.find_partials_with_pattern_parameters(source))

    table = Table(title=str(pattern))
    table.add_column("Reference")
    table.add_column("Pattern")
    table.add_column("Modifier", justify="center")
    table.add_column("Parameters", justify="center")

    references = partials.find_partials(source)
    for reference in references:
        table.add_row(
            reference,
            partials.find_partial(reference),
            "yes" if reference in with_modifiers else "",
            "yes" if reference in with_parameters else "",
        )
    for item in partials.find_list_items(source):
        table.add_row(item, "listItems", "", "")

    if not table.row_count:
        console.print("No partial references found.")
        return
    console.print(table)


@typer_app.command()
def meta(
    config_path: Path = typer.Option(
        Path(DEFAULT_CONFIG), "-c", "--config", help="Pattern lab config file."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show engine logs."),
) -> None:
    """Write the default _head/_foot templates into the meta directory if missing."""
    setup_logging(verbose)

    try:
        config = PatternLabConfig.load(config_path)
        engine = LiquidEngine(config, root=config_path.resolve().parent)
        paths = engine.spawn_meta(config)
    except Exception as exc:
        handle_error(exc)

    for path in paths:
        console.print(f"[green]✓[/green] {path}")


def app() -> None:
    """Entry point for the CLI."""
    typer_app()


if __name__ == "__main__":
    app()
