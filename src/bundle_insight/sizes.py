"""Measured sizes for compiled modules and their distribution onto sources.

Raw size is the UTF-8 byte length of a module's compiled content. The
compressed companion uses a pluggable compression function, gzip by
default. Virtual children share their parent's size in proportion to the
generated bytes their source maps map to them, or evenly when no mapping
information exists. Shares always add up to the parent's size.
"""

import gzip
from typing import Callable, Mapping, Optional, Sequence

from .attribution import AttributionResult
from .graph import ModuleGraph
from .logging_config import get_logger

logger = get_logger(__name__)

CompressionFn = Callable[[bytes], bytes]


def gzip_compress(data: bytes) -> bytes:
    """Deterministic gzip (fixed mtime) at the level CDNs commonly serve."""
    return gzip.compress(data, compresslevel=9, mtime=0)


def distribute(total: int, weights: Sequence[int]) -> list[int]:
    """Split ``total`` across ``weights``; the rounding remainder goes first.

    Non-positive weights get no proportional share, but the first child still
    takes the remainder whatever its weight. With no positive weight at all
    the split is even.

    >>> distribute(238, [1, 1])
    [119, 119]
    >>> distribute(10, [1, 1, 1])
    [4, 3, 3]
    >>> distribute(7, [0, 3, 3])
    [1, 3, 3]
    """
    if not weights:
        return []
    weight_sum = sum(weight for weight in weights if weight > 0)
    if weight_sum <= 0:
        shares = [total // len(weights)] * len(weights)
    else:
        shares = [total * max(weight, 0) // weight_sum for weight in weights]
    shares[0] += total - sum(shares)
    return shares


def compute_sizes(
    graph: ModuleGraph,
    asset_bytes: Mapping[str, bytes],
    compression: Optional[CompressionFn] = gzip_compress,
    attribution: Optional[AttributionResult] = None,
) -> None:
    """Measure real modules and distribute their sizes onto virtual children.

    Args:
        graph: Module graph after attribution.
        asset_bytes: Compiled content keyed by canonical module key.
        compression: Produces the compressed companion size; None skips it.
        attribution: Child order and mapped weights from ``attribute``. When
            omitted, children are taken from the graph in first-seen order
            and split evenly.

    Running this twice with the same inputs leaves the graph unchanged.
    """
    for key, content in asset_bytes.items():
        entry = graph.get(key)
        if entry is None or entry.is_virtual:
            logger.debug("No compiled module for measured content %s", key)
            continue
        changes: dict = {"bytes": len(content)}
        if compression is not None:
            changes["gzip"] = len(compression(content))
        graph.upsert(key, **changes)

    if attribution is not None:
        children_map = attribution.children
        weight_map = attribution.weights
    else:
        children_map = _children_from_graph(graph)
        weight_map = {}

    for parent, children in children_map.items():
        entry = graph.get(parent)
        if entry is None or not children:
            continue
        parent_weights = weight_map.get(parent)
        if parent_weights:
            weights = [parent_weights.get(child, 0) for child in children]
        else:
            weights = [1] * len(children)

        byte_shares = distribute(entry.bytes, weights)
        gzip_shares = distribute(entry.gzip, weights) if entry.gzip is not None else None
        for index, child in enumerate(children):
            graph.upsert(
                child,
                bytes=byte_shares[index],
                gzip=gzip_shares[index] if gzip_shares is not None else None,
            )


def _children_from_graph(graph: ModuleGraph) -> dict[str, list[str]]:
    children: dict[str, list[str]] = {}
    for entry in graph.entries():
        if entry.belongs_to is not None:
            children.setdefault(entry.belongs_to, []).append(entry.key)
    return children
