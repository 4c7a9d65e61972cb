"""Persist a rendered report and optionally open it."""

import webbrowser
from pathlib import Path
from typing import Optional

from ..config import ReportConfig
from ..logging_config import get_logger
from .builder import serialize
from .models import Report

logger = get_logger(__name__)


def write_report(
    report: Report,
    config: Optional[ReportConfig] = None,
    output_dir: Optional[Path] = None,
    output_path: Optional[Path] = None,
) -> Path:
    """Serialize ``report`` in the configured format and write it to disk.

    ``output_path`` wins over ``output_dir``/``config.output_filename``.

    Returns:
        Absolute path of the written file.
    """
    config = config or ReportConfig()
    if output_path is None:
        output_path = Path(output_dir or Path.cwd()) / config.output_filename

    out = Path(output_path).resolve()
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(serialize(report, config.format), encoding="utf-8")
    logger.info("Report written to %s", out)

    if config.open:
        webbrowser.open(out.as_uri())
    return out
