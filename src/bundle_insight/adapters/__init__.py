"""Adapters that supply build facts to the attribution core."""

from .base import Adapter
from .directory import DirectoryAdapter
from .facts import FactsFileAdapter, collect_facts

__all__ = [
    "Adapter",
    "DirectoryAdapter",
    "FactsFileAdapter",
    "collect_facts",
]
