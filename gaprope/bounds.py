"""Range resolution and bounds checks shared by the rope types."""

from __future__ import annotations

from typing import Optional, Tuple

from .summary import Text, _as_bytes


class RopeError(Exception):
    """Base class for errors raised on invalid rope positions."""


class OutOfBoundsError(RopeError, IndexError):
    """An index or offset lies past the end of the text."""

    def __init__(self, kind: str, what: str, value: int, length: int) -> None:
        self.kind = kind
        self.what = what
        self.value = value
        self.length = length
        if what == "index":
            limit = f"must be less than {length}"
        else:
            limit = f"must be at most {length}"
        super().__init__(
            f"{kind} {what} out of bounds: the {what} is {value} but it "
            f"{limit}"
        )


class NotCharBoundaryError(RopeError, ValueError):
    """A byte offset falls inside a multi-byte UTF-8 character."""

    def __init__(self, byte_offset: int, char: str, char_start: int) -> None:
        self.byte_offset = byte_offset
        self.char = char
        self.char_start = char_start
        char_len = len(char.encode("utf-8"))
        super().__init__(
            f"byte offset {byte_offset} is not a char boundary: it is inside "
            f"{char!r} (bytes {char_start}..{char_start + char_len})"
        )


class StartAfterEndError(RopeError, ValueError):
    """The start of a range is greater than its end."""

    def __init__(self, kind: str, start: int, end: int) -> None:
        self.kind = kind
        self.start = start
        self.end = end
        super().__init__(
            f"{kind} range starts at {start} but ends at {end}: the start "
            f"must not be greater than the end"
        )


def resolve_range(
    start: Optional[int], end: Optional[int], lo: int, hi: int
) -> Tuple[int, int]:
    """Fill in an open-ended range: a missing start is ``lo``, a missing
    end is ``hi``."""
    return (lo if start is None else start, hi if end is None else end)


def check_index(kind: str, index: int, length: int) -> None:
    """Raise unless ``0 <= index < length``."""
    if index < 0 or index >= length:
        raise OutOfBoundsError(kind, "index", index, length)


def check_offset(kind: str, offset: int, length: int) -> None:
    """Raise unless ``0 <= offset <= length``."""
    if offset < 0 or offset > length:
        raise OutOfBoundsError(kind, "offset", offset, length)


def check_range(kind: str, start: int, end: int, length: int) -> None:
    """Raise if ``start > end`` or if either end lies outside ``0..length``."""
    if start > end:
        raise StartAfterEndError(kind, start, end)
    if start < 0:
        raise OutOfBoundsError(kind, "offset", start, length)
    if end > length:
        raise OutOfBoundsError(kind, "offset", end, length)


def _is_continuation(byte: int) -> bool:
    return byte & 0xC0 == 0x80


def check_char_boundary(data: Text, byte_offset: int) -> None:
    """Raise unless ``byte_offset`` lies on a character boundary of the
    UTF-8 ``data``; the start and the end are always boundaries."""
    raw = _as_bytes(data)
    check_offset("byte", byte_offset, len(raw))
    if byte_offset == len(raw) or not _is_continuation(raw[byte_offset]):
        return
    start = byte_offset
    while start > 0 and _is_continuation(raw[start]):
        start -= 1
    stop = start + 1
    while stop < len(raw) and _is_continuation(raw[stop]):
        stop += 1
    char = raw[start:stop].decode("utf-8", errors="replace")
    raise NotCharBoundaryError(byte_offset, char, start)