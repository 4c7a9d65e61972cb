"""Data model for compiled modules and the original sources attributed to them.

Two kinds of entries share one keyspace:
  Real:    reported by a build tool adapter, ``belongs_to`` is None
  Virtual: discovered in a compiled module's source map, ``belongs_to``
           names the compiled module it was extracted from
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ModuleFormat(str, Enum):
    """Module system a compiled unit was written in."""

    ESM = "esm"
    CJS = "cjs"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value: "str | ModuleFormat | None") -> "ModuleFormat":
        if value is None:
            return cls.UNKNOWN
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown module format: {value!r}. Choose from: esm, cjs, unknown"
            ) from None


@dataclass
class ModuleEntry:
    """One compiled module or attributed original source."""

    key: str
    bytes: int = 0
    format: ModuleFormat = ModuleFormat.UNKNOWN
    imports: list[str] = field(default_factory=list)
    belongs_to: Optional[str] = None

    # Compressed companion to ``bytes``; None until sizes are computed with
    # a compression function.
    gzip: Optional[int] = None

    @property
    def is_virtual(self) -> bool:
        return self.belongs_to is not None

    def copy(self) -> "ModuleEntry":
        return ModuleEntry(
            key=self.key,
            bytes=self.bytes,
            format=self.format,
            imports=list(self.imports),
            belongs_to=self.belongs_to,
            gzip=self.gzip,
        )

    def to_dict(self) -> dict:
        data = {
            "bytes": self.bytes,
            "format": self.format.value,
            "imports": list(self.imports),
            "belongsTo": self.belongs_to,
        }
        if self.gzip is not None:
            data["gzip"] = self.gzip
        return data
