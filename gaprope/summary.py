"""Summaries of UTF-8 text chunks: byte, line break and UTF-16 counts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

Text = Union[bytes, bytearray, memoryview, str]


def _as_bytes(data: Text) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def count_line_breaks(data: Text) -> int:
    """Return the number of ``\\n`` bytes in ``data``."""
    return _as_bytes(data).count(b"\n")


def count_utf16_code_units(data: Text) -> int:
    """Return how many UTF-16 code units the UTF-8 ``data`` would take."""
    raw = _as_bytes(data)
    # Every code point starts with a non-continuation byte; four-byte
    # sequences (lead byte >= 0xF0) need a surrogate pair in UTF-16.
    starts = sum(1 for b in raw if b & 0xC0 != 0x80)
    astral = sum(1 for b in raw if b >= 0xF0)
    return starts + astral


def _metric_up_to(
    data: Text, byte_offset: int, total: int, count: Callable[[bytes], int]
) -> int:
    raw = _as_bytes(data)
    if not 0 <= byte_offset <= len(raw):
        raise ValueError(
            f"byte offset {byte_offset} is out of bounds for a chunk of "
            f"{len(raw)} bytes"
        )
    # Count the shorter side and derive the other from the total.
    if byte_offset <= len(raw) // 2:
        return count(raw[:byte_offset])
    return total - count(raw[byte_offset:])


def line_breaks_up_to(data: Text, byte_offset: int, total: int) -> int:
    """Line breaks in ``data[:byte_offset]``, given the total for ``data``."""
    return _metric_up_to(data, byte_offset, total, count_line_breaks)


def utf16_code_units_up_to(data: Text, byte_offset: int, total: int) -> int:
    """UTF-16 code units in ``data[:byte_offset]``, given the total."""
    return _metric_up_to(data, byte_offset, total, count_utf16_code_units)


@dataclass(frozen=True)
class ChunkSummary:
    """Aggregated measurements of a piece of UTF-8 text."""

    bytes: int = 0
    line_breaks: int = 0
    utf16_code_units: int = 0

    @classmethod
    def from_bytes(cls, data: Text) -> "ChunkSummary":
        """Summarize UTF-8 ``data`` (a ``str`` is encoded first)."""
        raw = _as_bytes(data)
        return cls(
            bytes=len(raw),
            line_breaks=count_line_breaks(raw),
            utf16_code_units=count_utf16_code_units(raw),
        )

    def __add__(self, other: "ChunkSummary") -> "ChunkSummary":
        if not isinstance(other, ChunkSummary):
            return NotImplemented
        return ChunkSummary(
            self.bytes + other.bytes,
            self.line_breaks + other.line_breaks,
            self.utf16_code_units + other.utf16_code_units,
        )

    def __sub__(self, other: "ChunkSummary") -> "ChunkSummary":
        if not isinstance(other, ChunkSummary):
            return NotImplemented
        result = ChunkSummary(
            self.bytes - other.bytes,
            self.line_breaks - other.line_breaks,
            self.utf16_code_units - other.utf16_code_units,
        )
        if min(result.bytes, result.line_breaks, result.utf16_code_units) < 0:
            raise ValueError(f"cannot subtract {other} from {self}")
        return result