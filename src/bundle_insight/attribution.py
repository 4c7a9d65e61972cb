"""Expansion of compiled modules into the original sources they were built from.

For every compiled module with a source map, each listed source becomes a
virtual entry linked to the module through ``belongs_to``. No bytes are
assigned here; ``sizes.compute_sizes`` distributes them afterwards using the
ordered child lists and mapped weights this module returns.
"""

from dataclasses import dataclass, field
from typing import Optional

from .exceptions import AttributionWarning, UnresolvedAttributionWarning
from .graph import ModuleGraph
from .logging_config import get_logger
from .paths import PathNormalizer
from .sourcemap.models import SourceMapSources

logger = get_logger(__name__)

# compiled module key -> its source map's source list, in recording order
SourceMapGraph = dict[str, SourceMapSources]


@dataclass
class AttributionResult:
    """Parent/child relations established by one ``attribute`` pass."""

    # compiled key -> virtual children in source-map order
    children: dict[str, list[str]] = field(default_factory=dict)
    # compiled key -> child key -> mapped bytes; only for maps with mappings
    weights: dict[str, dict[str, int]] = field(default_factory=dict)
    # compiled key -> real modules its source map also lists
    shadowed: dict[str, list[str]] = field(default_factory=dict)
    warnings: list[AttributionWarning] = field(default_factory=list)


def nearest_compiled(graph: ModuleGraph, key: str) -> str:
    """Follow ``belongs_to`` links up to the first real module."""
    seen = {key}
    entry = graph.get(key)
    while entry is not None and entry.belongs_to is not None:
        if entry.belongs_to in seen:
            break
        seen.add(entry.belongs_to)
        key = entry.belongs_to
        entry = graph.get(key)
    return key


def attribute(
    graph: ModuleGraph,
    source_map_graph: SourceMapGraph,
    normalizer: Optional[PathNormalizer] = None,
) -> AttributionResult:
    """Create virtual entries for every source listed in ``source_map_graph``.

    Rules:
      - duplicates within one source map collapse to one child
      - a source resolving to the compiled module itself is skipped
      - real modules are never demoted; the overlap is reported
      - a child already claimed by another module keeps its first owner
      - children of a virtual module attach to its nearest real ancestor
    """
    normalizer = normalizer or PathNormalizer()
    result = AttributionResult()

    for compiled_key, record in source_map_graph.items():
        if compiled_key not in graph:
            graph.upsert(compiled_key)
        owner = nearest_compiled(graph, compiled_key)
        owner_entry = graph.get(owner)
        owner_format = owner_entry.format if owner_entry is not None else None

        children: list[str] = []
        weights: dict[str, int] = {}

        for index, source in enumerate(record.sources):
            child_key = normalizer.resolve_source(compiled_key, source, record.source_root)
            if child_key is None:
                _warn(
                    result,
                    UnresolvedAttributionWarning(
                        compiled_key,
                        f"Source {source!r} does not resolve to a file path",
                        details={"source": str(source)},
                    ),
                )
                continue
            if child_key in (compiled_key, owner):
                logger.debug("Skipping self-reference %s in %s", source, compiled_key)
                continue

            existing = graph.get(child_key)
            if existing is None:
                graph.upsert(
                    child_key, bytes=0, format=owner_format, imports=[], belongs_to=owner
                )
            elif not existing.is_virtual:
                shadowed = result.shadowed.setdefault(owner, [])
                if child_key not in shadowed:
                    shadowed.append(child_key)
                    _warn(
                        result,
                        UnresolvedAttributionWarning(
                            child_key,
                            f"Listed as a source of {compiled_key} but reported as a "
                            "compiled module; left unattributed",
                            details={"parent": compiled_key},
                        ),
                    )
                continue
            elif existing.belongs_to != owner:
                _warn(
                    result,
                    UnresolvedAttributionWarning(
                        child_key,
                        f"Also listed as a source of {compiled_key}; keeping first "
                        f"attribution to {existing.belongs_to}",
                        details={"parent": compiled_key, "kept": str(existing.belongs_to)},
                    ),
                )
                continue

            if child_key not in weights:
                children.append(child_key)
                weights[child_key] = 0
            if record.weights is not None:
                weights[child_key] += record.weights[index]

        if children:
            owner_children = result.children.setdefault(owner, [])
            owner_children.extend(child for child in children if child not in owner_children)
            if record.weights is not None:
                owner_weights = result.weights.setdefault(owner, {})
                for child in children:
                    owner_weights[child] = owner_weights.get(child, 0) + weights[child]

    logger.debug(
        "Attributed %d virtual sources across %d compiled modules",
        sum(len(children) for children in result.children.values()),
        len(result.children),
    )
    return result


def _warn(result: AttributionResult, warning: AttributionWarning) -> None:
    if warning in result.warnings:
        return
    result.warnings.append(warning)
    logger.warning("%s", warning)
