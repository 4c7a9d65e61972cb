"""Report generation errors and non-fatal attribution warnings.

Errors derive from ``BundleInsightError`` and abort a run. Warnings derive
from ``UserWarning`` and are never raised by the core: they are collected
on the report and logged next to it.
"""

from typing import Dict, Optional

from .base import BundleInsightError


class ReportError(BundleInsightError):
    """Base class for report generation failures."""

    pass


class MissingOutputError(ReportError):
    """Raised when no output assets were ever recorded for the run."""

    def __init__(self, reason: str = "no assets were recorded for this build"):
        super().__init__("Could not detect output assets", details={"reason": reason})
        self.reason = reason


class InvalidFactsError(ReportError):
    """Raised when an adapter's fact document cannot be used."""

    def __init__(self, origin: str, reason: str):
        super().__init__(f"Invalid build facts in {origin}", details={"reason": reason})
        self.origin = origin
        self.reason = reason


class AttributionWarning(UserWarning):
    """Base class for recoverable problems found while attributing sizes."""

    def __init__(self, key: str, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.key = key
        self.message = message
        self.details = details or {}

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "key": self.key, "message": self.message}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributionWarning):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((self.kind, self.key, self.message))

    def __str__(self) -> str:
        return f"{self.key}: {self.message}"


class UnresolvedAttributionWarning(AttributionWarning):
    """A source-map source could not be resolved or collided with another entry."""


class MalformedSourceMapWarning(AttributionWarning):
    """A module's source map is present but could not be parsed."""
