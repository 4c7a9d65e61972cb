"""Exception hierarchy for Bundle Insight."""

from .base import BundleInsightError
from .config import ConfigurationError, InvalidConfigError
from .report import (
    AttributionWarning,
    InvalidFactsError,
    MalformedSourceMapWarning,
    MissingOutputError,
    ReportError,
    UnresolvedAttributionWarning,
)

__all__ = [
    "BundleInsightError",
    "ConfigurationError",
    "InvalidConfigError",
    "ReportError",
    "MissingOutputError",
    "InvalidFactsError",
    "AttributionWarning",
    "UnresolvedAttributionWarning",
    "MalformedSourceMapWarning",
]
