"""Base class for adapters that feed build facts into a Collector."""

from abc import ABC, abstractmethod

from ..collector import Collector


class Adapter(ABC):
    """Contract for adapters: push raw module and asset facts, nothing else."""

    name: str = "adapter"

    @abstractmethod
    def collect(self, collector: Collector) -> None:
        """Record this build's assets and modules on ``collector``."""
