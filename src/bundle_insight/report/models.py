"""The finished report: assets plus every attributed module entry."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from ..exceptions import AttributionWarning
from ..graph import ModuleEntry


@dataclass(frozen=True)
class Report:
    """Immutable result of one report run, ready for serialization."""

    assets: tuple[str, ...]
    inputs: Mapping[str, ModuleEntry]
    warnings: tuple[AttributionWarning, ...] = ()
    unreachable: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        ordered = {key: self.inputs[key].copy() for key in sorted(self.inputs)}
        object.__setattr__(self, "inputs", MappingProxyType(ordered))
        object.__setattr__(self, "assets", tuple(self.assets))
        object.__setattr__(self, "warnings", tuple(self.warnings))
        object.__setattr__(self, "unreachable", tuple(sorted(self.unreachable)))

    @property
    def total_bytes(self) -> int:
        """Size of all compiled modules; virtual entries are shares of these."""
        return sum(entry.bytes for entry in self.inputs.values() if not entry.is_virtual)

    @property
    def total_gzip(self) -> int:
        return sum(
            entry.gzip or 0 for entry in self.inputs.values() if not entry.is_virtual
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "assets": list(self.assets),
            "inputs": {key: entry.to_dict() for key, entry in self.inputs.items()},
            "warnings": [warning.to_dict() for warning in self.warnings],
        }
        if self.unreachable:
            data["unreachable"] = list(self.unreachable)
        return data
