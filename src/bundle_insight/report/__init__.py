"""Report assembly, serialization and persistence."""

from .builder import build_report, find_reachable, serialize
from .models import Report
from .writer import write_report

__all__ = [
    "Report",
    "build_report",
    "find_reachable",
    "serialize",
    "write_report",
]
