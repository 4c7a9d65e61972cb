"""JSON formatter: a direct structural dump of the report."""

import json

from ..report.models import Report
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render the report as JSON."""

    extension = "json"

    def format(self, report: Report) -> str:
        return json.dumps(report.to_dict(), indent=2, sort_keys=True) + "\n"
