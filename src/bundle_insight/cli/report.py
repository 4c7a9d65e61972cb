"""Report CLI command -- build a report from an adapter's fact document."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..adapters import FactsFileAdapter
from ..exceptions import BundleInsightError
from ..logging_config import setup_logging
from . import app
from ._common import console, resolve_config, run_adapter


@app.command()
def report(
    facts: Path = typer.Argument(
        ...,
        help="JSON fact document written by a bundler plugin",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    fmt: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Report format: html (default) or json",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Report file path (default: current directory)",
        dir_okay=False,
    ),
    root: Optional[Path] = typer.Option(
        None,
        "--root",
        help="Project root that report paths are relative to (default: cwd)",
        file_okay=False,
    ),
    include: Optional[str] = typer.Option(None, "--include", help="Regex of module ids to include"),
    exclude: Optional[str] = typer.Option(None, "--exclude", help="Regex of module ids to skip"),
    gzip: Optional[bool] = typer.Option(None, "--gzip/--no-gzip", help="Compute gzip sizes"),
    open_report: Optional[bool] = typer.Option(
        None, "--open/--no-open", help="Open the report when done"
    ),
    unreachable: Optional[str] = typer.Option(
        None, "--unreachable", help="Unreachable inputs: include, flag or exclude"
    ),
    strict: bool = typer.Option(False, "--strict", help="Exit 2 when warnings were recorded"),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress all but ERROR logging"),
):
    """
    Generate a report from build facts collected by a bundler plugin.

    [bold cyan]Examples:[/bold cyan]

      bundle-insight report build-facts.json

      bundle-insight report build-facts.json --format json -o sizes.json
    """
    logger = setup_logging(verbose=verbose, quiet=quiet)

    try:
        settings = resolve_config(
            config=config,
            fmt=fmt,
            root=root,
            include=include,
            exclude=exclude,
            gzip=gzip,
            open_report=open_report,
            unreachable=unreachable,
            verbose=verbose,
            quiet=quiet,
        )
        run_adapter(FactsFileAdapter(facts), settings, output=output, strict=strict)
    except typer.Exit:
        raise
    except BundleInsightError as e:
        logger.debug("Report generation failed", exc_info=True)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
