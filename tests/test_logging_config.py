"""Tests for logging setup."""

import logging

import pytest

from bundle_insight.logging_config import get_logger, resolve_verbosity, setup_logging


class TestSetupLogging:
    @pytest.mark.parametrize(
        "kwargs,level",
        [
            ({}, logging.WARNING),
            ({"verbose": True}, logging.DEBUG),
            ({"quiet": True}, logging.ERROR),
            ({"verbose": True, "verbosity": "quiet"}, logging.ERROR),
        ],
    )
    def test_levels(self, kwargs, level):
        assert setup_logging(**kwargs).level == level

    def test_unknown_verbosity(self):
        with pytest.raises(ValueError, match="Unknown verbosity"):
            setup_logging(verbosity="chatty")

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "run.log"
        setup_logging(verbose=True, log_file=str(log_file))
        get_logger("sizes").debug("measured %d modules", 3)
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "measured 3 modules" in log_file.read_text()


class TestHelpers:
    def test_quiet_wins(self):
        assert resolve_verbosity(verbose=True, quiet=True) == "quiet"

    def test_get_logger_namespacing(self):
        assert get_logger().name == "bundle_insight"
        assert get_logger("sizes").name == "bundle_insight.sizes"
        assert get_logger("bundle_insight.sizes") is get_logger("sizes")
