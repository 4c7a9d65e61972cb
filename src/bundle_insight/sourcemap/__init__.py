"""Source map loading, parsing and mapped-range measurement."""

from .load import (
    CodeAndMap,
    SourceMapError,
    find_source_mapping_url,
    load_code_and_map,
    parse_source_map,
    read_source_map,
)
from .models import SourceMapSources
from .vlq import decode_mappings, decode_vlq, mapped_weights

__all__ = [
    "CodeAndMap",
    "SourceMapError",
    "SourceMapSources",
    "decode_mappings",
    "decode_vlq",
    "find_source_mapping_url",
    "load_code_and_map",
    "mapped_weights",
    "parse_source_map",
    "read_source_map",
]
