"""Locating and parsing the source map that belongs to a compiled asset."""

import base64
import json
import os
import posixpath
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union
from urllib.parse import unquote

from ..logging_config import get_logger
from .models import SourceMapSources
from .vlq import mapped_weights

logger = get_logger(__name__)

# //# sourceMappingURL=... (JS) and /*# sourceMappingURL=... */ (CSS);
# the legacy "@" marker is still emitted by some tools.
_SOURCE_MAPPING_URL_RE = re.compile(
    r"(?://[#@]|/\*[#@])\s*sourceMappingURL=([^\s'\"]+?)\s*(?:\*/)?\s*$",
    re.MULTILINE,
)
_XSSI_PREFIX = ")]}'"

Payload = Union[str, bytes, dict]


class SourceMapError(ValueError):
    """Raised when a source map payload cannot be parsed."""


@dataclass
class CodeAndMap:
    """A compiled asset's bytes plus its raw source map payload, if any."""

    code: bytes
    map_payload: Optional[Payload] = None
    source_root: Optional[str] = None
    error: Optional[str] = None


def find_source_mapping_url(code: str) -> Optional[str]:
    """Return the last ``sourceMappingURL`` annotation in ``code``."""
    matches = _SOURCE_MAPPING_URL_RE.findall(code)
    return matches[-1] if matches else None


def decode_data_url(url: str) -> bytes:
    """Decode an inline ``data:`` source map URL."""
    header, sep, data = url.partition(",")
    if not sep or not header.startswith("data:"):
        raise SourceMapError("Malformed data URL")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(data, validate=True)
        except ValueError as exc:
            raise SourceMapError(f"Invalid base64 payload: {exc}") from exc
    return unquote(data).encode("utf-8")


def load_code_and_map(path: Path) -> CodeAndMap:
    """Read a compiled asset and the source map it references.

    Looks at the ``sourceMappingURL`` annotation first (inline data URL or a
    file relative to the asset) and falls back to ``<asset>.map``. When the
    map lives in another directory, ``source_root`` carries the map's
    directory relative to the asset so its sources still resolve.
    """
    path = Path(path)
    code = path.read_bytes()
    url = find_source_mapping_url(code.decode("utf-8", errors="replace"))

    if url and url.startswith("data:"):
        try:
            return CodeAndMap(code, map_payload=decode_data_url(url))
        except SourceMapError as exc:
            return CodeAndMap(code, error=str(exc))

    candidates = []
    if url:
        candidates.append(path.parent / unquote(url.split("?", 1)[0]))
    candidates.append(path.with_name(path.name + ".map"))

    for candidate in candidates:
        if candidate.is_file():
            source_root = None
            if candidate.parent.resolve() != path.parent.resolve():
                source_root = Path(
                    os.path.relpath(candidate.parent.resolve(), path.parent.resolve())
                ).as_posix()
            return CodeAndMap(code, map_payload=candidate.read_bytes(), source_root=source_root)

    if url:
        logger.debug("Source map %s referenced by %s was not found", url, path)
    return CodeAndMap(code)


def parse_source_map(payload: Payload) -> dict[str, Any]:
    """Parse a raw source map payload into a validated dict."""
    if isinstance(payload, dict):
        data = payload
    else:
        if isinstance(payload, bytes):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise SourceMapError(f"Source map is not UTF-8: {exc}") from exc
        text = payload.lstrip("\ufeff")
        if text.startswith(_XSSI_PREFIX):
            text = text.split("\n", 1)[1] if "\n" in text else ""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SourceMapError(f"Invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise SourceMapError("Source map must be a JSON object")

    if "sections" in data:
        return _flatten_index_map(data)

    sources = data.get("sources")
    if not isinstance(sources, list):
        raise SourceMapError("Source map has no 'sources' list")
    if any(source is not None and not isinstance(source, str) for source in sources):
        raise SourceMapError("Source map 'sources' must contain strings")
    if "mappings" in data and not isinstance(data["mappings"], str):
        raise SourceMapError("Source map 'mappings' must be a string")
    return data


def _flatten_index_map(data: dict[str, Any]) -> dict[str, Any]:
    # Sections carry their own offsets, so only the source list survives.
    sections = data.get("sections")
    if not isinstance(sections, list):
        raise SourceMapError("Index map 'sections' must be a list")
    sources: list[str] = []
    for section in sections:
        if not isinstance(section, dict) or not isinstance(section.get("map"), dict):
            raise SourceMapError("Index map section without an embedded map")
        nested = parse_source_map(section["map"])
        root = nested.get("sourceRoot")
        for source in nested["sources"]:
            if source is None:
                continue
            sources.append(posixpath.join(root, source) if root else source)
    return {"version": data.get("version", 3), "sources": sources}


def read_source_map(
    payload: Payload,
    code: Optional[str] = None,
    source_root: Optional[str] = None,
) -> SourceMapSources:
    """Extract the source list (and mapped byte weights when ``code`` is given).

    Raises:
        SourceMapError: If the payload or its mappings cannot be parsed.
    """
    data = parse_source_map(payload)
    sources = ["" if source is None else source for source in data["sources"]]

    root = data.get("sourceRoot") or None
    if root is not None and not isinstance(root, str):
        raise SourceMapError("Source map 'sourceRoot' must be a string")
    if source_root:
        root = posixpath.join(source_root, root) if root else source_root

    weights = None
    mappings = data.get("mappings")
    if code is not None and mappings and sources:
        try:
            weights = mapped_weights(code, mappings, len(sources))
        except ValueError as exc:
            raise SourceMapError(f"Invalid mappings: {exc}") from exc

    return SourceMapSources(sources=sources, source_root=root, weights=weights)
