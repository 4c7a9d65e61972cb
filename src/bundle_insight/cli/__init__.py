"""CLI entry point: the typer app plus its analyze and report subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="bundle-insight",
    help="Bundle Insight - attribute bundle size to original sources",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"bundle-insight {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Attribute compiled bundle sizes back to the sources that produced them."""


# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402
from .report import report as _report  # noqa: F401, E402
