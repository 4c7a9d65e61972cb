"""Thread-safe store of module entries keyed by canonical key."""

import threading
from typing import Any, Iterator, Optional

from .models import ModuleEntry, ModuleFormat

_FIELDS = ("bytes", "format", "imports", "belongs_to", "gzip")


class ModuleGraph:
    """Mapping from canonical key to ``ModuleEntry``.

    Each key owns a lock, so adapters writing different modules never wait on
    each other while writes to one key are applied in order. Entries are
    never removed; a graph reflects a single build pass.
    """

    def __init__(self) -> None:
        self._entries: dict[str, ModuleEntry] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._table_lock = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._table_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
                self._entries[key] = ModuleEntry(key=key)
            return lock

    def upsert(self, key: str, **fields: Any) -> None:
        """Merge ``fields`` into the entry for ``key``, creating it if absent.

        Fields passed overwrite the stored value; fields not passed keep it.
        """
        unknown = set(fields) - set(_FIELDS)
        if unknown:
            raise TypeError(f"Unknown module fields: {', '.join(sorted(unknown))}")
        changes = _validate(fields)

        with self._lock_for(key):
            entry = self._entries[key]
            for name, value in changes.items():
                setattr(entry, name, value)

    def get(self, key: str) -> Optional[ModuleEntry]:
        """Return a snapshot of the entry for ``key``, or None."""
        with self._table_lock:
            lock = self._locks.get(key)
        if lock is None:
            return None
        with lock:
            return self._entries[key].copy()

    def keys(self) -> list[str]:
        """Keys in first-observed order."""
        with self._table_lock:
            return list(self._entries)

    def entries(self) -> list[ModuleEntry]:
        return [entry for entry in (self.get(key) for key in self.keys()) if entry is not None]

    def __contains__(self, key: object) -> bool:
        with self._table_lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._table_lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())


def _validate(fields: dict[str, Any]) -> dict[str, Any]:
    changes = dict(fields)
    if "bytes" in changes:
        size = changes["bytes"]
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise ValueError(f"bytes must be a non-negative integer, got {size!r}")
    if "gzip" in changes and changes["gzip"] is not None:
        size = changes["gzip"]
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise ValueError(f"gzip must be a non-negative integer, got {size!r}")
    if "format" in changes:
        changes["format"] = ModuleFormat.coerce(changes["format"])
    if "imports" in changes:
        changes["imports"] = [str(item) for item in (changes["imports"] or [])]
    return changes
