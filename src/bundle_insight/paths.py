"""Canonical keys for module and source identifiers.

Every identifier reported by a build tool (absolute path, path relative to a
source map, ``webpack://`` style URL, Rollup virtual id) is folded into one
root-relative, forward-slash key so entries from different origins merge.

Example:
    >>> PathNormalizer("/repo").normalize("/repo/src\\\\util/../index.js")
    'src/index.js'
"""

import os
import posixpath
import re
from typing import Dict, Optional

# scheme://namespace/ prefix used by webpack, rspack and friends
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://[^/]*/?")
_FILE_URL_RE = re.compile(r"^file://", re.IGNORECASE)
_DRIVE_RE = re.compile(r"^([A-Za-z]):/")


def _to_posix(path: str) -> str:
    return path.replace("\\", "/")


def _strip_virtual(path: str) -> str:
    # Rollup marks plugin-generated ids with a NUL; query strings and
    # fragments carry loader options, not identity.
    path = path.replace("\0", "")
    for marker in ("?", "#"):
        index = path.find(marker)
        if index > 0:
            path = path[:index]
    return path


class PathNormalizer:
    """Normalizes identifiers relative to a project root.

    Results are cached per instance; create one normalizer per report run or
    call ``clear()`` between runs.
    """

    def __init__(self, root: Optional[str] = None):
        raw_root = _to_posix(str(root) if root is not None else os.getcwd())
        self.root = posixpath.normpath(raw_root) if raw_root else "/"
        self._cache: Dict[str, str] = {}

    def normalize(self, path: str) -> str:
        """Return the canonical key for ``path``. Pure and idempotent."""
        cached = self._cache.get(path)
        if cached is not None:
            return cached
        key = self._normalize(path)
        # Collapsing segments can surface a prefix that only a later pass removes.
        again = self._normalize(key)
        while again != key:
            key, again = again, self._normalize(again)
        self._cache[path] = key
        self._cache[key] = key
        return key

    def _normalize(self, path: str) -> str:
        value = _to_posix(str(path))
        while True:
            stripped = _strip_virtual(value)
            if _FILE_URL_RE.match(stripped):
                stripped = stripped[len("file://"):]
            elif _SCHEME_RE.match(stripped):
                stripped = _SCHEME_RE.sub("", stripped, count=1)
            if stripped == value:
                break
            value = stripped

        drive = _DRIVE_RE.match(value)
        if drive:
            root_drive = _DRIVE_RE.match(self.root + "/")
            if root_drive and root_drive.group(1).lower() == drive.group(1).lower():
                value = posixpath.relpath(
                    "/" + value[3:], "/" + (self.root + "/")[3:].rstrip("/")
                )
            return posixpath.normpath(value)

        if value.startswith("/"):
            if self.root == "/":
                value = value.lstrip("/")
            else:
                value = posixpath.relpath(value, self.root)

        return posixpath.normpath(value) if value else "."

    def resolve_source(
        self, compiled_key: str, source: str, source_root: Optional[str] = None
    ) -> Optional[str]:
        """Resolve a source-map ``sources`` entry against its compiled module.

        Relative entries resolve against the directory of ``compiled_key``
        (plus ``sourceRoot`` when given). Absolute paths and URL-style
        entries are normalized as-is. Returns None when the entry cannot
        denote a file.
        """
        if source is None:
            return None
        value = _strip_virtual(_to_posix(str(source)).strip())
        if not value or value.startswith("data:"):
            return None

        if self._is_absolute(value):
            key = self.normalize(value)
        else:
            base = posixpath.dirname(compiled_key)
            if source_root:
                root = _to_posix(source_root)
                # An absolute or URL sourceRoot replaces the module's directory.
                base = root if self._is_absolute(root) else posixpath.join(base, root)
            if not base:
                joined = value
            elif base.endswith("/"):
                joined = base + value
            else:
                joined = base + "/" + value
            key = self.normalize(joined)

        if key in ("", "."):
            return None
        return key

    @staticmethod
    def _is_absolute(value: str) -> bool:
        return bool(
            value.startswith("/")
            or _DRIVE_RE.match(value)
            or _FILE_URL_RE.match(value)
            or _SCHEME_RE.match(value)
        )

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


def normalize(path: str, root: Optional[str] = None) -> str:
    """Module-level shortcut for one-off normalization."""
    return PathNormalizer(root).normalize(path)
