"""Configuration loading and management for Bundle Insight.

Configuration sources are merged in priority order:
    1. Defaults (defined in ReportConfig)
    2. Global config (~/.bundle-insight.toml)
    3. Project config (./bundle-insight.toml)
    4. Explicit config file
    5. Environment variables (BUNDLE_INSIGHT_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(format="json", gzip=False)
    >>> config.format
    'json'
"""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import InvalidConfigError
from .logging_config import resolve_verbosity

ReportFormat = Literal["json", "html"]
UnreachablePolicy = Literal["include", "flag", "exclude"]
Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "BUNDLE_INSIGHT_"
CONFIG_FILENAME = "bundle-insight.toml"

_FORMATS = ("json", "html")
_POLICIES = ("include", "flag", "exclude")
_VERBOSITIES = ("quiet", "normal", "verbose")


@dataclass(frozen=True)
class ReportConfig:
    """Settings for one report run.

    Attributes:
        Module filtering (applied before facts reach the graph):
            include: Regex a module id must match; None accepts every id
            exclude: Regex that vetoes a module id after ``include``

        Output:
            format: ``json`` (machine readable) or ``html`` (rendered)
            filename: Report file name; extension follows ``format`` if omitted
            open: Open the written report in the default viewer

        Sizes:
            gzip: Compute gzip sizes next to raw byte sizes

        Report scoping:
            unreachable: What to do with entries not reachable from any asset
                (``include`` silently, ``flag`` them, or ``exclude`` them)

        Paths:
            root: Project root that canonical keys are relative to

        Logging:
            verbosity: quiet, normal or verbose
    """

    include: Optional[str] = None
    exclude: Optional[str] = None

    format: ReportFormat = "html"
    filename: str = "bundle-insight-report"
    open: bool = False

    gzip: bool = True

    unreachable: UnreachablePolicy = "flag"

    root: Optional[str] = None

    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for key in ("include", "exclude"):
            pattern = getattr(self, key)
            if pattern is None:
                continue
            try:
                re.compile(pattern)
            except re.error as exc:
                raise InvalidConfigError(key, pattern, f"not a valid regular expression: {exc}")

        if self.format not in _FORMATS:
            raise InvalidConfigError("format", self.format, f"expected one of {', '.join(_FORMATS)}")
        if self.unreachable not in _POLICIES:
            raise InvalidConfigError(
                "unreachable", self.unreachable, f"expected one of {', '.join(_POLICIES)}"
            )
        if self.verbosity not in _VERBOSITIES:
            raise InvalidConfigError(
                "verbosity", self.verbosity, f"expected one of {', '.join(_VERBOSITIES)}"
            )
        if not self.filename or "/" in self.filename or "\\" in self.filename:
            raise InvalidConfigError("filename", self.filename, "must be a plain file name")

    @property
    def include_re(self) -> Optional[re.Pattern[str]]:
        return re.compile(self.include) if self.include else None

    @property
    def exclude_re(self) -> Optional[re.Pattern[str]]:
        return re.compile(self.exclude) if self.exclude else None

    @property
    def output_filename(self) -> str:
        """Report file name with the extension matching ``format``."""
        suffix = f".{self.format}"
        return self.filename if self.filename.endswith(suffix) else self.filename + suffix

    @property
    def project_root(self) -> str:
        return self.root if self.root is not None else os.getcwd()


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> ReportConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); None values
            are ignored so unset flags do not mask file settings

    Returns:
        Validated ReportConfig instance

    Raises:
        InvalidConfigError: If a config file or value is invalid
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / f".{CONFIG_FILENAME}"
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = Path.cwd() / CONFIG_FILENAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise InvalidConfigError("config_file", config_file, "file not found")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    verbose = overrides.pop("verbose", False)
    quiet = overrides.pop("quiet", False)
    if verbose or quiet:
        overrides["verbosity"] = resolve_verbosity(verbose, quiet)
    merged.update({key: value for key, value in overrides.items() if value is not None})

    known = {f.name for f in fields(ReportConfig)}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise InvalidConfigError(unknown[0], merged[unknown[0]], "unknown configuration key")

    return ReportConfig(**merged)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from BUNDLE_INSIGHT_* environment variables.

    Supported environment variables:
        BUNDLE_INSIGHT_INCLUDE: regex
        BUNDLE_INSIGHT_EXCLUDE: regex
        BUNDLE_INSIGHT_FORMAT: json/html
        BUNDLE_INSIGHT_FILENAME: str
        BUNDLE_INSIGHT_OPEN: bool (true/false/1/0)
        BUNDLE_INSIGHT_GZIP: bool
        BUNDLE_INSIGHT_UNREACHABLE: include/flag/exclude
        BUNDLE_INSIGHT_ROOT: path
        BUNDLE_INSIGHT_VERBOSITY: quiet/normal/verbose
    """
    type_hints = get_type_hints(ReportConfig)
    result: dict[str, Any] = {}

    for field_name in ReportConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue
        try:
            result[field_name] = _parse_env_value(env_value, type_hints[field_name])
        except ValueError as exc:
            raise InvalidConfigError(env_key, env_value, str(exc))

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type."""
    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")
    return value


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file; a ``[bundle-insight]`` table takes precedence."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise InvalidConfigError("config_file", path, str(exc))
    section = data.get("bundle-insight")
    return dict(section) if isinstance(section, dict) else data
