"""Analyze CLI command -- report on a build output directory."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..adapters import DirectoryAdapter
from ..exceptions import BundleInsightError
from ..logging_config import setup_logging
from . import app
from ._common import console, resolve_config, run_adapter


@app.command()
def analyze(
    output_dir: Path = typer.Argument(
        ...,
        help="Build output directory to analyze",
        exists=True,
        file_okay=False,
        dir_okay=True,
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
        help="Report file path (default: inside the output directory)",
        dir_okay=False,
    ),
    root: Optional[Path] = typer.Option(
        None,
        "--root",
        help="Project root that report paths are relative to (default: cwd)",
        file_okay=False,
    ),
    include: Optional[str] = typer.Option(None, "--include", help="Regex of asset paths to include"),
    exclude: Optional[str] = typer.Option(None, "--exclude", help="Regex of asset paths to skip"),
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
    Attribute the size of every script and stylesheet in a build directory.

    Each asset's source map (inline or external) is used to split its size
    across the original sources it was compiled from.

    [bold cyan]Examples:[/bold cyan]

      bundle-insight analyze dist

      bundle-insight analyze dist --format json -o report.json

      bundle-insight analyze build --root . --exclude "vendor" --open
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
        run_adapter(
            DirectoryAdapter(output_dir),
            settings,
            output=output,
            output_dir=output_dir,
            strict=strict,
        )
    except typer.Exit:
        raise
    except BundleInsightError as e:
        logger.debug("Analysis failed", exc_info=True)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
