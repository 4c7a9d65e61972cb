"""Base formatter interface for report serialization."""

from abc import ABC, abstractmethod

from ..report.models import Report


class BaseFormatter(ABC):
    """Abstract base class for report formatters."""

    extension: str = ""

    @abstractmethod
    def format(self, report: Report) -> str:
        """Return the serialized report. Same report, same output."""
