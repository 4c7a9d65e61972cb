"""Assemble module entries and assets into a ``Report`` and serialize it."""

from collections import deque
from typing import Iterable, Mapping, Optional, Sequence

from ..config import ReportConfig
from ..exceptions import AttributionWarning, MissingOutputError
from ..graph import ModuleEntry, ModuleGraph
from ..logging_config import get_logger
from ..paths import PathNormalizer
from .models import Report

logger = get_logger(__name__)


def find_reachable(
    entries: Mapping[str, ModuleEntry], roots: Iterable[str]
) -> set[str]:
    """Keys reachable from ``roots`` through imports and belongs-to links.

    A reachable module makes its attributed sources reachable, and a
    reachable source keeps its owning module reachable. Import edges to keys
    outside ``entries`` are followed no further.
    """
    children: dict[str, list[str]] = {}
    for entry in entries.values():
        if entry.belongs_to is not None:
            children.setdefault(entry.belongs_to, []).append(entry.key)

    reachable: set[str] = set()
    queue = deque(key for key in roots if key in entries)
    while queue:
        key = queue.popleft()
        if key in reachable:
            continue
        reachable.add(key)
        entry = entries[key]
        neighbours = list(entry.imports) + children.get(key, [])
        if entry.belongs_to is not None:
            neighbours.append(entry.belongs_to)
        queue.extend(n for n in neighbours if n in entries and n not in reachable)
    return reachable


def build_report(
    assets: Sequence[str],
    graph: ModuleGraph,
    config: Optional[ReportConfig] = None,
    warnings: Sequence[AttributionWarning] = (),
    outputs: Optional[Mapping[str, Sequence[str]]] = None,
    normalizer: Optional[PathNormalizer] = None,
) -> Report:
    """Build the report for ``assets`` from a fully attributed graph.

    Args:
        assets: Output file paths of the build, in emission order.
        graph: Module graph after attribution and size computation.
        config: Supplies the unreachable-entry policy.
        warnings: Attribution warnings to attach.
        outputs: Optional asset path -> module ids the asset contains.
        normalizer: Canonicalizes asset paths; defaults to the config root.

    Raises:
        MissingOutputError: If ``assets`` is empty.
    """
    config = config or ReportConfig()
    if not assets:
        raise MissingOutputError()
    normalizer = normalizer or PathNormalizer(config.project_root)

    asset_keys = [normalizer.normalize(asset) for asset in assets]
    entries = {entry.key: entry for entry in graph.entries()}

    roots = [key for key in asset_keys if key in entries]
    for modules in (outputs or {}).values():
        roots.extend(normalizer.normalize(module) for module in modules)

    if roots:
        reachable = find_reachable(entries, roots)
    else:
        logger.debug("No asset maps onto a recorded module; treating all entries as reachable")
        reachable = set(entries)
    unreachable = sorted(set(entries) - reachable)

    if unreachable and config.unreachable == "exclude":
        entries = {key: entry for key, entry in entries.items() if key in reachable}
        logger.debug("Excluded %d unreachable entries", len(unreachable))
        unreachable = []
    elif config.unreachable == "include":
        unreachable = []

    return Report(
        assets=tuple(dict.fromkeys(asset_keys)),
        inputs=entries,
        warnings=tuple(warnings),
        unreachable=tuple(unreachable),
    )


def serialize(report: Report, fmt: str = "json") -> str:
    """Render ``report`` with the formatter registered for ``fmt``."""
    from ..formatters import get_formatter

    return get_formatter(fmt).format(report)
