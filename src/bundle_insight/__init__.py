"""
Bundle Insight - Bundle Size Attribution

Attributes the compiled, on-disk size of JavaScript and CSS build output
back to the original source files that produced it, using the source maps
emitted next to each asset, and assembles the result into a dependency and
size report (JSON or a self-contained HTML treemap).
"""

__version__ = "0.1.0"

from .attribution import attribute
from .collector import Collector
from .config import ReportConfig, load_config
from .graph import ModuleEntry, ModuleFormat, ModuleGraph
from .paths import PathNormalizer, normalize
from .report import Report, build_report, serialize
from .sizes import compute_sizes

__all__ = [
    "Collector",  # Main entry point for adapters
    "ReportConfig",
    "load_config",
    "ModuleEntry",
    "ModuleFormat",
    "ModuleGraph",
    "PathNormalizer",
    "normalize",
    "attribute",
    "compute_sizes",
    "build_report",
    "serialize",
    "Report",
]
