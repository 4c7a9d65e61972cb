"""Build hierarchical JSON for a treemap from flat report inputs.

Compiled modules whose size was distributed onto attributed sources are
represented by those sources only, so every byte is drawn once. Leaf nodes
carry ``value`` (area), a ``color_value`` percentile and the size metrics
for tooltips.
"""

from bisect import bisect_left
from typing import Any, Dict, Mapping, Tuple

from ..graph import ModuleEntry


def build_treemap_data(
    inputs: Mapping[str, ModuleEntry],
    color_metric: str = "bytes",
) -> Dict[str, Any]:
    """Convert report inputs into treemap hierarchical JSON.

    Structure::

        {
            "name": "root",
            "children": [
                {
                    "name": "src",
                    "children": [
                        {
                            "name": "index.ts",
                            "path": "src/index.ts",
                            "value": 120,
                            "color_value": 0.85,
                            "format": "esm",
                            "belongs_to": "dist/index.js",
                            "signals": {"bytes": 120, "gzip": 80}
                        }
                    ]
                }
            ]
        }

    Parameters
    ----------
    inputs:
        Mapping of canonical key to module entry.
    color_metric:
        ``bytes`` or ``gzip``; which size to colour by.

    Returns
    -------
    Dict[str, Any]
        A nested dictionary suitable for JSON serialisation.
    """
    owners = {entry.belongs_to for entry in inputs.values() if entry.belongs_to is not None}
    leaves = {key: entry for key, entry in inputs.items() if key not in owners}

    ranked = sorted(_metrics(entry).get(color_metric, 0) for entry in leaves.values())

    root: Dict[str, Any] = {"name": "root", "children": []}
    # directory path -> its node, so siblings are found without scanning
    directories: Dict[Tuple[str, ...], Dict[str, Any]] = {(): root}

    for key, entry in sorted(leaves.items()):
        *folders, filename = [part for part in key.split("/") if part] or [key]

        parent = root
        for depth in range(1, len(folders) + 1):
            path = tuple(folders[:depth])
            node = directories.get(path)
            if node is None:
                node = {"name": folders[depth - 1], "children": []}
                parent["children"].append(node)
                directories[path] = node
            parent = node

        signals = _metrics(entry)
        rank = bisect_left(ranked, signals.get(color_metric, 0)) / len(ranked)
        parent["children"].append(
            {
                "name": filename,
                "path": key,
                "value": max(1, entry.bytes),
                "color_value": round(rank, 3),
                "format": entry.format.value,
                "belongs_to": entry.belongs_to,
                "signals": signals,
            }
        )

    return root


def _metrics(entry: ModuleEntry) -> Dict[str, int]:
    values = {"bytes": entry.bytes}
    if entry.gzip is not None:
        values["gzip"] = entry.gzip
    return values
