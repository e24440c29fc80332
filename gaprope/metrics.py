"""Metrics used to measure and index into text chunks."""

from __future__ import annotations

from enum import Enum

from .summary import (
    ChunkSummary,
    Text,
    _as_bytes,
    line_breaks_up_to,
    utf16_code_units_up_to,
)


def byte_of_line(data: Text, line_offset: int) -> int:
    """Byte offset just after the ``line_offset``-th ``\\n`` in ``data``.

    Offsets past the last line break map to the end of ``data``.
    """
    raw = _as_bytes(data)
    pos = 0
    for _ in range(line_offset):
        idx = raw.find(b"\n", pos)
        if idx < 0:
            return len(raw)
        pos = idx + 1
    return pos


def _utf8_len(ch: str) -> int:
    cp = ord(ch)
    if cp < 0x80:
        return 1
    if cp < 0x800:
        return 2
    if cp < 0x10000:
        return 3
    return 4


def byte_of_utf16_code_unit(data: Text, utf16_offset: int) -> int:
    """Byte offset of the given UTF-16 code unit offset in UTF-8 ``data``.

    An offset inside a surrogate pair maps to the start of that character;
    offsets past the end map to the end of ``data``.
    """
    raw = _as_bytes(data)
    units = 0
    byte_pos = 0
    for ch in raw.decode("utf-8"):
        width = 2 if ord(ch) >= 0x10000 else 1
        if units + width > utf16_offset:
            return byte_pos
        units += width
        byte_pos += _utf8_len(ch)
    return byte_pos


class Metric(Enum):
    """A way of measuring text: bytes, lines or UTF-16 code units."""

    BYTE = "byte"
    RAW_LINE = "raw_line"
    LINE = "line"
    UTF16 = "utf16"

    def measure(self, summary: ChunkSummary) -> int:
        """Return this metric's value in ``summary``."""
        if self is Metric.BYTE:
            return summary.bytes
        if self is Metric.UTF16:
            return summary.utf16_code_units
        return summary.line_breaks

    def to_byte_offset(self, data: Text, offset: int) -> int:
        """Convert an offset in this metric to a byte offset in ``data``."""
        if self is Metric.BYTE:
            return offset
        if self is Metric.UTF16:
            return byte_of_utf16_code_unit(data, offset)
        return byte_of_line(data, offset)

    def summary_up_to(
        self,
        data: Text,
        summary: ChunkSummary,
        offset: int,
        byte_offset: int,
    ) -> ChunkSummary:
        """Summary of ``data[:byte_offset]``, where ``offset`` is the same
        position expressed in this metric and ``summary`` covers ``data``."""
        raw = _as_bytes(data)
        if self is Metric.BYTE:
            if offset != byte_offset:
                raise ValueError(
                    f"byte offset mismatch: {offset} != {byte_offset}"
                )
            line_breaks = line_breaks_up_to(
                raw, byte_offset, summary.line_breaks
            )
            utf16 = utf16_code_units_up_to(
                raw, byte_offset, summary.utf16_code_units
            )
        elif self is Metric.UTF16:
            line_breaks = line_breaks_up_to(
                raw, byte_offset, summary.line_breaks
            )
            utf16 = offset
        else:
            line_breaks = offset
            utf16 = utf16_code_units_up_to(
                raw, byte_offset, summary.utf16_code_units
            )
        return ChunkSummary(
            bytes=byte_offset,
            line_breaks=line_breaks,
            utf16_code_units=utf16,
        )