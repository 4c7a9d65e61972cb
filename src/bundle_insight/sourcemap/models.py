"""Source list extracted from one compiled module's source map."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class SourceMapSources:
    """Original sources as written in a source map, un-normalized.

    ``weights`` is aligned with ``sources`` and holds the number of generated
    bytes mapped to each source, when the mappings could be measured.
    """

    sources: list[str] = field(default_factory=list)
    source_root: Optional[str] = None
    weights: Optional[list[int]] = None

    def __post_init__(self) -> None:
        if self.weights is not None and len(self.weights) != len(self.sources):
            raise ValueError(
                f"weights has {len(self.weights)} items for {len(self.sources)} sources"
            )
