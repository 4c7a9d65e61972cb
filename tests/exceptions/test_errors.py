"""Tests for the error hierarchy and attribution warnings."""

import warnings

import pytest

from bundle_insight.exceptions import (
    AttributionWarning,
    BundleInsightError,
    ConfigurationError,
    InvalidConfigError,
    InvalidFactsError,
    MalformedSourceMapWarning,
    MissingOutputError,
    ReportError,
    UnresolvedAttributionWarning,
)


class TestErrorHierarchy:
    """Errors share one base so the CLI can catch them together."""

    @pytest.mark.parametrize(
        "error",
        [
            InvalidConfigError("format", "xml", "expected one of json, html"),
            MissingOutputError(),
            InvalidFactsError("facts.json", "'modules' must be a list"),
        ],
    )
    def test_all_errors_derive_from_base(self, error):
        assert isinstance(error, BundleInsightError)

    def test_grouping(self):
        assert issubclass(InvalidConfigError, ConfigurationError)
        assert issubclass(MissingOutputError, ReportError)
        assert issubclass(InvalidFactsError, ReportError)

    def test_str_includes_details(self):
        error = InvalidConfigError("format", "xml", "expected one of json, html")
        assert str(error) == (
            "Invalid configuration for format: xml "
            "(key=format, value=xml, reason=expected one of json, html)"
        )

    def test_str_without_details(self):
        assert str(BundleInsightError("boom")) == "boom"

    def test_missing_output_message(self):
        error = MissingOutputError()
        assert error.message == "Could not detect output assets"
        assert error.details == {"reason": "no assets were recorded for this build"}


class TestAttributionWarnings:
    def test_are_user_warnings(self):
        """Warnings can go through the warnings module when callers want that."""
        assert issubclass(AttributionWarning, UserWarning)
        with pytest.warns(UnresolvedAttributionWarning):
            warnings.warn(UnresolvedAttributionWarning("a.ts", "collision"))

    def test_to_dict(self):
        warning = MalformedSourceMapWarning("dist/a.js", "Invalid JSON")
        assert warning.to_dict() == {
            "kind": "MalformedSourceMapWarning",
            "key": "dist/a.js",
            "message": "Invalid JSON",
        }
        assert str(warning) == "dist/a.js: Invalid JSON"

    def test_equality_by_kind_key_and_message(self):
        first = UnresolvedAttributionWarning("a.ts", "collision", details={"parent": "x"})
        same = UnresolvedAttributionWarning("a.ts", "collision")
        other_kind = MalformedSourceMapWarning("a.ts", "collision")

        assert first == same
        assert hash(first) == hash(same)
        assert first != other_kind
        assert len({first, same, other_kind}) == 2
