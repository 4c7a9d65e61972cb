"""Adapter for fact documents written by out-of-process bundler plugins.

Document shape::

    {
        "assets": ["/abs/dist/index.js"],
        "outputs": {"/abs/dist/index.js": ["/abs/src/index.ts"]},
        "modules": [
            {
                "id": "/abs/src/index.ts",
                "bytes": 120,
                "format": "esm",
                "imports": ["/abs/src/util.ts"],
                "sourceMapSources": ["../lib/a.ts"],
                "sourceRoot": null,
                "sourceWeights": [120],
                "sourceMap": "{...}",
                "code": "..."
            }
        ]
    }

Only ``id`` is required per module.
"""

import json
from pathlib import Path
from typing import Any, Optional

from ..collector import Collector
from ..exceptions import InvalidFactsError
from ..logging_config import get_logger
from .base import Adapter

logger = get_logger(__name__)


class FactsFileAdapter(Adapter):
    """Collect facts from a JSON document on disk."""

    name = "facts"

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise InvalidFactsError(str(self.path), f"unreadable fact document: {exc}")
        if not isinstance(data, dict):
            raise InvalidFactsError(str(self.path), "fact document must be a JSON object")
        return data

    def collect(self, collector: Collector) -> None:
        data = self.load()
        collect_facts(data, collector, origin=str(self.path))
        self.measure_assets(data.get("assets") or [], collector)

    def measure_assets(self, assets: list[str], collector: Collector) -> int:
        """Record the content of emitted files that still exist on disk.

        Relative asset paths resolve against the project root. Returns the
        number of files measured.
        """
        root = Path(collector.config.project_root)
        measured = 0
        for asset in assets:
            path = root / asset
            if not path.is_file():
                continue
            collector.record_asset_content(str(path), path.read_bytes())
            measured += 1
        logger.debug("Measured %d of %d assets on disk", measured, len(assets))
        return measured


def _checked_list(
    value: Any, origin: str, where: str, item_type: type = str, allow_none: bool = False
) -> Optional[list]:
    """Return ``value`` when it is a list of ``item_type`` (or None)."""
    if value is None:
        return None
    if not isinstance(value, list):
        raise InvalidFactsError(origin, f"{where} must be a list")
    for item in value:
        if item is None and allow_none:
            continue
        if not isinstance(item, item_type) or isinstance(item, bool):
            raise InvalidFactsError(
                origin, f"{where} must contain only {item_type.__name__} values"
            )
    return value


def _checked_outputs(value: Any, origin: str) -> Optional[dict[str, list]]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise InvalidFactsError(origin, "'outputs' must map asset paths to lists")
    return {
        asset: _checked_list(modules, origin, f"outputs[{asset!r}]") or []
        for asset, modules in value.items()
    }


def collect_facts(data: dict[str, Any], collector: Collector, origin: str = "<facts>") -> None:
    """Record an in-memory fact document on ``collector``.

    Raises:
        InvalidFactsError: If the document does not have the shape above.
    """
    modules = data.get("modules") or []
    if not isinstance(modules, list):
        raise InvalidFactsError(origin, "'modules' must be a list")
    assets = _checked_list(data.get("assets"), origin, "'assets'") or []
    outputs = _checked_outputs(data.get("outputs"), origin)

    for index, module in enumerate(modules):
        if not isinstance(module, dict) or not module.get("id"):
            raise InvalidFactsError(origin, f"modules[{index}] needs an 'id'")
        where = f"modules[{index}]"
        imports = _checked_list(module.get("imports"), origin, f"{where}.imports")
        sources = _checked_list(
            module.get("sourceMapSources"), origin, f"{where}.sourceMapSources", allow_none=True
        )
        weights = _checked_list(
            module.get("sourceWeights"), origin, f"{where}.sourceWeights", int
        )
        if weights is not None and len(weights) != len(sources or []):
            raise InvalidFactsError(
                origin, f"{where}.sourceWeights must match sourceMapSources in length"
            )
        try:
            collector.record_module(
                str(module["id"]),
                bytes=module.get("bytes"),
                format=module.get("format"),
                imports=imports,
                sources=sources,
                source_root=module.get("sourceRoot"),
                weights=weights,
                source_map=module.get("sourceMap"),
                code=module.get("code"),
            )
        except (TypeError, ValueError) as exc:
            raise InvalidFactsError(origin, f"{where}: {exc}") from exc

    logger.debug("Recorded %d modules from %s", len(modules), origin)
    collector.record_assets(assets, outputs=outputs)
