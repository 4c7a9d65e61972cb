"""HTML formatter: a self-contained document with an embedded treemap."""

from ..report.models import Report
from ..visualization.report import render_html
from .base import BaseFormatter


class HtmlFormatter(BaseFormatter):
    """Render the report as a standalone HTML page."""

    extension = "html"

    def format(self, report: Report) -> str:
        return render_html(report)
