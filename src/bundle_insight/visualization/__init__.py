"""Visualization layer: HTML report rendering with an interactive treemap."""

from .report import render_html
from .treemap import build_treemap_data

__all__ = [
    "render_html",
    "build_treemap_data",
]
