"""
Logging configuration for Bundle Insight.

Log output goes to stderr through rich so it never mixes with a report
printed or piped on stdout. Core modules log progress at DEBUG and every
recorded attribution warning at WARNING.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "bundle_insight"

VERBOSITY_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}


def resolve_verbosity(verbose: bool = False, quiet: bool = False) -> str:
    """Map the CLI's ``--verbose``/``--quiet`` flags onto a verbosity name."""
    if quiet:
        return "quiet"
    if verbose:
        return "verbose"
    return "normal"


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[str] = None,
    verbosity: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging with rich handler for colored output.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Suppress all but ERROR level logging
        log_file: Optional file path to write logs to
        verbosity: ``quiet``, ``normal`` or ``verbose``; overrides the flags,
            typically taken from a resolved ``ReportConfig``

    Returns:
        Configured logger instance for bundle_insight
    """
    if verbosity is None:
        verbosity = resolve_verbosity(verbose, quiet)
    level = VERBOSITY_LEVELS.get(verbosity)
    if level is None:
        raise ValueError(
            f"Unknown verbosity: {verbosity!r}. Choose from: {', '.join(VERBOSITY_LEVELS)}"
        )
    detailed = level <= logging.DEBUG

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=detailed,
            # Module keys may contain brackets that rich would read as markup.
            markup=False,
            show_time=True,
            show_path=detailed,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the ``bundle_insight`` namespace.

    ``get_logger("sizes")`` and ``get_logger("bundle_insight.sizes")`` name
    the same logger; with no name the package logger is returned.
    """
    if name is None:
        return logging.getLogger(LOGGER_NAME)

    if not name.startswith(LOGGER_NAME):
        name = f"{LOGGER_NAME}.{name}"

    return logging.getLogger(name)
