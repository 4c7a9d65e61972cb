"""Base64 VLQ decoding for source map ``mappings`` strings.

Reference: Source Map Revision 3 Proposal, "Base64 VLQ" section.
"""

from typing import NamedTuple, Optional

_BASE64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_DIGITS = {char: index for index, char in enumerate(_BASE64)}

_CONTINUATION_BIT = 0b100000
_DIGIT_MASK = 0b011111


class Segment(NamedTuple):
    """A decoded mapping segment. Only the fields size attribution needs."""

    column: int
    source: Optional[int] = None


def decode_vlq(text: str) -> list[int]:
    """Decode one comma-free VLQ run into its signed integers."""
    values: list[int] = []
    value = 0
    shift = 0
    for char in text:
        digit = _DIGITS.get(char)
        if digit is None:
            raise ValueError(f"Invalid base64 VLQ character: {char!r}")
        value += (digit & _DIGIT_MASK) << shift
        if digit & _CONTINUATION_BIT:
            shift += 5
            continue
        negative = value & 1
        value >>= 1
        values.append(-value if negative else value)
        value = 0
        shift = 0
    if shift:
        raise ValueError(f"Truncated VLQ sequence: {text!r}")
    return values


def decode_mappings(mappings: str) -> list[list[Segment]]:
    """Decode a ``mappings`` string into segments grouped by generated line.

    Generated columns are relative within a line; source indices are relative
    across the whole string, so the running state carries over lines.
    """
    lines: list[list[Segment]] = []
    source = 0
    original_line = 0
    original_column = 0
    name = 0

    for line_text in mappings.split(";"):
        column = 0
        segments: list[Segment] = []
        for chunk in line_text.split(","):
            if not chunk:
                continue
            fields = decode_vlq(chunk)
            if len(fields) not in (1, 4, 5):
                raise ValueError(f"Invalid mapping segment {chunk!r}: {len(fields)} fields")
            column += fields[0]
            if len(fields) == 1:
                segments.append(Segment(column))
                continue
            source += fields[1]
            original_line += fields[2]
            original_column += fields[3]
            if len(fields) == 5:
                name += fields[4]
            segments.append(Segment(column, source))
        segments.sort(key=lambda segment: segment.column)
        lines.append(segments)

    return lines


def mapped_weights(code: str, mappings: str, source_count: int) -> list[int]:
    """Count generated UTF-8 bytes mapped to each source index.

    A segment covers its generated line from its column up to the next
    segment's column (or the end of the line). Unmapped stretches and
    line terminators count towards no source.
    """
    weights = [0] * source_count
    code_lines = [line.removesuffix("\r") for line in code.split("\n")]

    for line_number, segments in enumerate(decode_mappings(mappings)):
        if line_number >= len(code_lines):
            break
        text = code_lines[line_number]
        for index, segment in enumerate(segments):
            if segment.source is None or not 0 <= segment.source < source_count:
                continue
            start = min(segment.column, len(text))
            end = segments[index + 1].column if index + 1 < len(segments) else len(text)
            end = min(max(end, start), len(text))
            weights[segment.source] += len(text[start:end].encode("utf-8"))

    return weights
