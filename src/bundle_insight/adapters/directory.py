"""Adapter that reads an already built output directory from disk.

Every emitted script or stylesheet is one compiled module; its source map
(inline or external) supplies the original sources and mapped ranges.
"""

import os
from pathlib import Path
from typing import Iterable, Optional

from ..collector import Collector
from ..exceptions import MalformedSourceMapWarning
from ..logging_config import get_logger
from ..sourcemap import load_code_and_map
from .base import Adapter

logger = get_logger(__name__)

ASSET_SUFFIXES = (".js", ".mjs", ".cjs", ".css")


class DirectoryAdapter(Adapter):
    """Collect facts from the files in a build output directory."""

    name = "directory"

    def __init__(self, output_dir: Path, suffixes: Optional[Iterable[str]] = None):
        self.output_dir = Path(output_dir)
        self.suffixes = tuple(suffixes) if suffixes is not None else ASSET_SUFFIXES

    def find_assets(self) -> list[Path]:
        """Emitted assets under ``output_dir`` in a stable order."""
        assets = []
        for dirpath, dirnames, filenames in os.walk(self.output_dir):
            dirnames.sort()
            for filename in sorted(filenames):
                if filename.endswith(self.suffixes):
                    assets.append(Path(dirpath) / filename)
        return assets

    def collect(self, collector: Collector) -> None:
        assets = self.find_assets()
        logger.debug("Found %d assets in %s", len(assets), self.output_dir)

        for asset in assets:
            loaded = load_code_and_map(asset)
            key = collector.record_module(
                str(asset.resolve()),
                code=loaded.code,
                source_map=loaded.map_payload,
                source_root=loaded.source_root,
            )
            if key is not None and loaded.error:
                collector.add_warning(
                    MalformedSourceMapWarning(key, f"Source map could not be read: {loaded.error}")
                )

        collector.record_assets([str(asset.resolve()) for asset in assets])
