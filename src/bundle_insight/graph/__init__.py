"""Module graph: entries for compiled modules and their attributed sources."""

from .models import ModuleEntry, ModuleFormat
from .module_graph import ModuleGraph

__all__ = [
    "ModuleEntry",
    "ModuleFormat",
    "ModuleGraph",
]
