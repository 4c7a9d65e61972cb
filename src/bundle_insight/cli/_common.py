"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..adapters import Adapter
from ..collector import Collector
from ..config import ReportConfig, load_config
from ..logging_config import setup_logging
from ..report import Report, write_report

console = Console()


def format_bytes(size: Optional[int]) -> str:
    if size is None:
        return "-"
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KiB"
    return f"{size / 1024 / 1024:.2f} MiB"


def resolve_config(
    config: Optional[Path] = None,
    fmt: Optional[str] = None,
    root: Optional[Path] = None,
    include: Optional[str] = None,
    exclude: Optional[str] = None,
    gzip: Optional[bool] = None,
    open_report: Optional[bool] = None,
    unreachable: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> ReportConfig:
    """Build a config from CLI options; unset options defer to files/env."""
    return load_config(
        config_file=config,
        format=fmt,
        root=str(root.resolve()) if root is not None else None,
        include=include,
        exclude=exclude,
        gzip=gzip,
        open=open_report,
        unreachable=unreachable,
        verbose=verbose,
        quiet=quiet,
    )


def print_summary(report: Report, top: int = 10) -> None:
    """Print the largest inputs and any warnings."""
    owners = {e.belongs_to for e in report.inputs.values() if e.belongs_to is not None}
    largest = sorted(
        (entry for key, entry in report.inputs.items() if key not in owners),
        key=lambda entry: (-entry.bytes, entry.key),
    )[:top]

    table = Table(title=f"Largest inputs ({len(report.inputs)} total)", show_lines=False)
    table.add_column("Input", style="cyan", overflow="fold")
    table.add_column("Format")
    table.add_column("Size", justify="right")
    table.add_column("Gzip", justify="right")
    for entry in largest:
        table.add_row(
            escape(entry.key),
            entry.format.value,
            format_bytes(entry.bytes),
            format_bytes(entry.gzip),
        )
    console.print(table)

    console.print(
        f"Assets: [bold]{len(report.assets)}[/bold]  "
        f"Total: [bold]{format_bytes(report.total_bytes)}[/bold]"
        + (f"  Gzip: [bold]{format_bytes(report.total_gzip)}[/bold]" if report.total_gzip else "")
    )
    if report.unreachable:
        console.print(f"[dim]{len(report.unreachable)} inputs not reachable from any asset[/dim]")
    for warning in report.warnings:
        console.print(f"[yellow]{warning.kind}[/yellow] {escape(str(warning))}")


def run_adapter(
    adapter: Adapter,
    settings: ReportConfig,
    output: Optional[Path] = None,
    output_dir: Optional[Path] = None,
    strict: bool = False,
) -> Path:
    """Collect, build, print and write one report."""
    setup_logging(verbosity=settings.verbosity)
    collector = Collector(settings)
    adapter.collect(collector)
    report = collector.generate()

    path = write_report(report, settings, output_dir=output_dir, output_path=output)
    if settings.verbosity != "quiet":
        print_summary(report)
    console.print(f"\nReport saved to: [bold green]{escape(str(path))}[/bold green]")

    if strict and report.warnings:
        console.print(f"[red]{len(report.warnings)} warnings with --strict[/red]")
        raise typer.Exit(2)
    return path
