"""Output formatters for Bundle Insight reports."""

from .base import BaseFormatter
from .html_formatter import HtmlFormatter
from .json_formatter import JsonFormatter


def get_formatter(name: str) -> BaseFormatter:
    """Get a formatter instance by name.

    Args:
        name: One of "json", "html"

    Returns:
        Formatter instance

    Raises:
        ValueError: If name is not recognized
    """
    formatters = {
        "json": JsonFormatter,
        "html": HtmlFormatter,
    }
    cls = formatters.get(name)
    if cls is None:
        raise ValueError(f"Unknown formatter: {name!r}. Choose from: {', '.join(sorted(formatters))}")
    return cls()


__all__ = [
    "BaseFormatter",
    "HtmlFormatter",
    "JsonFormatter",
    "get_formatter",
]
