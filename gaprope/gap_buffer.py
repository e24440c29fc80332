"""A fixed-capacity gap buffer holding one leaf's worth of UTF-8 text."""

from __future__ import annotations

from typing import Iterable, Optional

from .bounds import check_char_boundary, check_index, check_offset
from .segmenter import chunk_min as _chunk_min
from .segmenter import is_char_boundary as _is_char_boundary
from .segmenter import min_bytes as _min_bytes
from .segmenter import split_adjusted
from .summary import ChunkSummary, Text, _as_bytes

_MAX_CAPACITY = 0xFFFF

_ESCAPES = {
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
    "\\": "\\\\",
    '"': '\\"',
}


def _debug_escape(text: str) -> str:
    return "".join(
        _ESCAPES.get(ch, ch if ch.isprintable() else f"\\u{{{ord(ch):x}}}")
        for ch in text
    )


class GapBuffer:
    """A gap buffer of at most ``max_bytes`` bytes (and at most 65535).

    The free space sits between a left and a right chunk, so repeated edits
    at the same position only move the bytes between the old and the new
    position. Only the first ``len_left()`` and the last ``len_right()``
    bytes of the storage hold text.
    """

    __slots__ = ("max_bytes", "_bytes", "left_summary", "_len_right")

    def __init__(self, max_bytes: int) -> None:
        if not 0 < max_bytes <= _MAX_CAPACITY:
            raise ValueError(
                f"capacity must be between 1 and {_MAX_CAPACITY}, "
                f"got {max_bytes}"
            )
        self.max_bytes = max_bytes
        self._bytes = bytearray(max_bytes)
        self.left_summary = ChunkSummary()
        self._len_right = 0

    # ----- construction -------------------------------------------------

    @classmethod
    def from_text(cls, text: Text, max_bytes: int) -> "GapBuffer":
        """Create a buffer holding ``text``, split evenly around the gap."""
        return cls.from_chunks([text], max_bytes)

    @classmethod
    def from_chunks(cls, chunks: Iterable[Text], max_bytes: int) -> "GapBuffer":
        """Create a buffer holding the concatenation of ``chunks``.

        About half the bytes go to the left chunk, rounded up to a character
        boundary.
        """
        parts = [_as_bytes(c) for c in chunks]
        buffer = cls(max_bytes)
        total = sum(len(p) for p in parts)
        if total == 0:
            return buffer
        if total > max_bytes:
            raise ValueError(
                f"{total} bytes do not fit in a buffer of {max_bytes} bytes"
            )

        to_left = total // 2
        left = bytearray()
        rest = iter(parts)
        for part in rest:
            if len(left) + len(part) <= to_left:
                left += part
                continue
            to_first, to_second = split_adjusted(
                part, to_left - len(left), True
            )
            left += to_first
            right = to_second + b"".join(rest)
            buffer._set_left(bytes(left), ChunkSummary.from_bytes(left))
            buffer._set_right(right)
            return buffer
        raise AssertionError("unreachable: the total length is not zero")

    # ----- basic accessors ----------------------------------------------

    def __len__(self) -> int:
        return self.len_left() + self.len_right()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, GapBuffer):
            return self._content() == other._content()
        if isinstance(other, str):
            return self._content() == other.encode("utf-8")
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self._content() == bytes(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            '"'
            + _debug_escape(self.left_chunk())
            + "~" * self.len_gap()
            + _debug_escape(self.right_chunk())
            + '"'
        )

    def left_chunk(self) -> str:
        """The text before the gap."""
        return self._left_bytes().decode("utf-8")

    def right_chunk(self) -> str:
        """The text after the gap."""
        return self._right_bytes().decode("utf-8")

    def last_chunk(self) -> str:
        """The right chunk if it isn't empty, the left one otherwise."""
        return self.right_chunk() if self._len_right else self.left_chunk()

    def len_left(self) -> int:
        """Byte length of the left chunk."""
        return self.left_summary.bytes

    def len_right(self) -> int:
        """Byte length of the right chunk."""
        return self._len_right

    def len_gap(self) -> int:
        """Byte length of the free space between the chunks."""
        return self.max_bytes - self.len_left() - self.len_right()

    def min_bytes(self) -> int:
        """Bytes below which this buffer counts as underfilled."""
        return _min_bytes(self.max_bytes)

    def chunk_min(self) -> int:
        """Bytes every leaf of this capacity must always reach."""
        return _chunk_min(self.max_bytes)

    def byte(self, byte_index: int) -> int:
        """Return the byte at ``byte_index``."""
        check_index("byte", byte_index, len(self))
        if byte_index < self.len_left():
            return self._bytes[byte_index]
        start = self.max_bytes - self._len_right
        return self._bytes[start + byte_index - self.len_left()]

    def is_char_boundary(self, byte_offset: int) -> bool:
        """Return ``True`` if ``byte_offset`` lies on a character boundary."""
        check_offset("byte", byte_offset, len(self))
        if byte_offset <= self.len_left():
            return _is_char_boundary(self._left_bytes(), byte_offset)
        return _is_char_boundary(
            self._right_bytes(), byte_offset - self.len_left()
        )

    def assert_char_boundary(self, byte_offset: int) -> None:
        """Raise unless ``byte_offset`` lies on a character boundary."""
        check_char_boundary(self._content(), byte_offset)

    def has_trailing_newline(self) -> bool:
        """Return ``True`` if the text ends with ``\\n``."""
        last = self._right_bytes() if self._len_right else self._left_bytes()
        return last.endswith(b"\n")

    def summarize(self) -> ChunkSummary:
        """Compute the summary of the whole text."""
        return self.left_summary + ChunkSummary.from_bytes(self._right_bytes())

    # ----- moving text between buffers ----------------------------------

    def add_from_right(self, bytes_to_add: int, right: "GapBuffer") -> ChunkSummary:
        """Move up to ``bytes_to_add`` bytes from the start of ``right`` to
        the end of this buffer and return the summary of what was moved.

        Fewer bytes move if that offset isn't a character boundary.
        """
        if bytes_to_add > len(right):
            raise ValueError(
                f"cannot take {bytes_to_add} bytes from a buffer of "
                f"{len(right)}"
            )
        if len(self) + bytes_to_add > self.max_bytes:
            raise ValueError("the buffer would go over its capacity")

        if bytes_to_add <= right.len_left():
            move_left, _ = split_adjusted(
                right._left_bytes(), bytes_to_add, False
            )
            summary = right._summarize_left_up_to(len(move_left))
            self.append_str(move_left)
            right.remove_up_to(len(move_left), summary)
            return summary

        move_left, _ = split_adjusted(
            right._right_bytes(), bytes_to_add - right.len_left(), False
        )
        summary = right.left_summary + ChunkSummary.from_bytes(move_left)
        self.append_two(right._left_bytes(), move_left)
        right.remove_up_to(summary.bytes, summary)
        return summary

    def append_other(self, summary: ChunkSummary, other: "GapBuffer") -> None:
        """Move all of ``other`` to the end of this buffer, emptying it.

        ``summary`` is the current summary of this buffer.
        """
        if len(self) + len(other) > self.max_bytes:
            raise ValueError("the buffer would go over its capacity")
        len_left = self.len_left()
        own_right = self._right_bytes()
        right_summary = summary - self.left_summary
        moved = other._content()

        self._bytes[len_left:len_left + len(own_right)] = own_right
        self._set_right(moved)
        self.left_summary = self.left_summary + right_summary

        other.left_summary = ChunkSummary()
        other._len_right = 0

    def append_str(self, s: Text) -> None:
        """Append ``s`` to the end of the right chunk."""
        data = _as_bytes(s)
        if len(data) > self.len_gap():
            raise ValueError(
                f"{len(data)} bytes do not fit in a gap of {self.len_gap()}"
            )
        self._set_right(self._right_bytes() + data)

    def append_two(self, a: Text, b: Text) -> None:
        """Append ``a`` and then ``b`` to the end of the right chunk."""
        self.append_str(_as_bytes(a) + _as_bytes(b))

    def insert(self, insert_at: int, s: Text, summary: ChunkSummary) -> ChunkSummary:
        """Insert ``s`` at ``insert_at`` and return the new summary.

        ``summary`` is the current summary of this buffer.
        """
        data = _as_bytes(s)
        self.assert_char_boundary(insert_at)
        if len(data) > self.len_gap():
            raise ValueError(
                f"{len(data)} bytes do not fit in a gap of {self.len_gap()}"
            )
        self.move_gap(insert_at, summary)
        start = self.len_left()
        self._bytes[start:start + len(data)] = data
        inserted = ChunkSummary.from_bytes(data)
        self.left_summary = self.left_summary + inserted
        return summary + inserted

    def move_gap(self, byte_offset: int, summary: ChunkSummary) -> None:
        """Move the gap to ``byte_offset``.

        ``summary`` is the current summary of this buffer.
        """
        self.assert_char_boundary(byte_offset)
        len_left = self.len_left()

        if byte_offset < len_left:
            moved = bytes(self._bytes[byte_offset:len_left])
            self.left_summary = self._summarize_left_up_to(byte_offset)
            self._set_right(moved + self._right_bytes())
        elif byte_offset > len_left:
            len_moved = byte_offset - len_left
            moved_summary = self._summarize_right_up_to(len_moved, summary)
            right = self._right_bytes()
            self._bytes[len_left:byte_offset] = right[:len_moved]
            self.left_summary = self.left_summary + moved_summary
            self._len_right -= len_moved

    def move_to_right(
        self, bytes_to_move: int, right: "GapBuffer", summary: ChunkSummary
    ) -> ChunkSummary:
        """Move up to the last ``bytes_to_move`` bytes of this buffer to the
        start of ``right`` and return the summary of what was moved.

        Fewer bytes move if that offset isn't a character boundary.
        ``summary`` is the current summary of this buffer.
        """
        if bytes_to_move > len(self):
            raise ValueError(
                f"cannot move {bytes_to_move} bytes from a buffer of "
                f"{len(self)}"
            )
        if len(right) + bytes_to_move > right.max_bytes:
            raise ValueError("the right buffer would go over its capacity")

        if bytes_to_move <= self.len_right():
            _, move_right = split_adjusted(
                self._right_bytes(), self.len_right() - bytes_to_move, True
            )
            moved = ChunkSummary.from_bytes(move_right)
            right.prepend(move_right, moved)
            self.truncate_from(len(self) - len(move_right), summary)
            return moved

        _, move_right = split_adjusted(
            self._left_bytes(),
            self.len_left() - (bytes_to_move - self.len_right()),
            True,
        )
        moved = ChunkSummary.from_bytes(move_right) + (
            summary - self.left_summary
        )
        right.prepend_two(move_right, self._right_bytes(), moved)
        self.truncate_from(self.len_left() - len(move_right), summary)
        return moved

    def prepend(self, s: Text, prepended_summary: ChunkSummary) -> None:
        """Prepend ``s``, whose summary is ``prepended_summary``."""
        data = _as_bytes(s)
        if len(data) > self.len_gap():
            raise ValueError(
                f"{len(data)} bytes do not fit in a gap of {self.len_gap()}"
            )
        left = self._left_bytes()
        self._set_left(data + left, self.left_summary + prepended_summary)

    def prepend_two(self, a: Text, b: Text, prepended_summary: ChunkSummary) -> None:
        """Prepend ``a`` followed by ``b``; ``prepended_summary`` covers both."""
        self.prepend(_as_bytes(a) + _as_bytes(b), prepended_summary)

    # ----- removing and replacing ---------------------------------------

    def remove_up_to(self, byte_offset: int, removed_summary: ChunkSummary) -> None:
        """Remove the first ``byte_offset`` bytes, whose summary is
        ``removed_summary``."""
        self.assert_char_boundary(byte_offset)
        len_left = self.len_left()
        if byte_offset <= len_left:
            kept = bytes(self._bytes[byte_offset:len_left])
            self._bytes[:len(kept)] = kept
            self.left_summary = self.left_summary - removed_summary
        else:
            self._len_right -= byte_offset - len_left
            self.left_summary = ChunkSummary()

    def replace_non_overflowing(
        self, start: int, end: int, s: Text, summary: ChunkSummary
    ) -> ChunkSummary:
        """Replace the bytes in ``start..end`` with ``s`` and return the new
        summary. The result must fit in the buffer.

        ``summary`` is the current summary of this buffer.
        """
        data = _as_bytes(s)
        self._check_range(start, end)
        if len(self) - (end - start) + len(data) > self.max_bytes:
            raise ValueError("the replacement would overflow the buffer")

        self.move_gap(end, summary)
        removed = self.summarize_range(start, end, summary)
        added = ChunkSummary.from_bytes(data)
        self._bytes[start:start + len(data)] = data
        self.left_summary = self.left_summary - removed + added
        return summary - removed + added

    def summarize_range(self, start: int, end: int, summary: ChunkSummary) -> ChunkSummary:
        """Summary of the text in ``start..end``.

        ``summary`` is the current summary of this buffer.
        """
        self._check_range(start, end)
        if end - start <= len(self) // 2:
            return self._summarize_range_direct(start, end, summary)
        return (
            summary
            - self._summarize_range_direct(0, start, summary)
            - self._summarize_range_direct(end, len(self), summary)
        )

    def truncate_from(self, byte_offset: int, summary: ChunkSummary) -> ChunkSummary:
        """Drop everything from ``byte_offset`` on and return the new
        summary. ``summary`` is the current summary of this buffer."""
        self.assert_char_boundary(byte_offset)
        if byte_offset <= self.len_left():
            new_summary = self._summarize_left_up_to(byte_offset)
            self.left_summary = new_summary
            self._len_right = 0
            return new_summary

        offset = byte_offset - self.len_left()
        new_right = self._summarize_right_up_to(offset, summary)
        self._set_right(self._right_bytes()[:offset])
        return self.left_summary + new_right

    # ----- internals ----------------------------------------------------

    def _left_bytes(self) -> bytes:
        return bytes(self._bytes[: self.len_left()])

    def _right_bytes(self) -> bytes:
        return bytes(self._bytes[self.max_bytes - self._len_right:])

    def _content(self) -> bytes:
        return self._left_bytes() + self._right_bytes()

    def _set_left(self, data: bytes, summary: ChunkSummary) -> None:
        self._bytes[: len(data)] = data
        self.left_summary = summary

    def _set_right(self, data: bytes) -> None:
        self._bytes[self.max_bytes - len(data):] = data
        self._len_right = len(data)

    def _check_range(self, start: int, end: int, length: Optional[int] = None) -> None:
        if start > end:
            raise ValueError(f"range start {start} is after its end {end}")
        self.assert_char_boundary(start)
        self.assert_char_boundary(end)

    def _summarize_left_up_to(self, byte_offset: int) -> ChunkSummary:
        left = self._left_bytes()
        if byte_offset <= len(left) // 2:
            return ChunkSummary.from_bytes(left[:byte_offset])
        return self.left_summary - ChunkSummary.from_bytes(left[byte_offset:])

    def _summarize_right_up_to(
        self, byte_offset: int, summary: ChunkSummary
    ) -> ChunkSummary:
        right = self._right_bytes()
        if byte_offset <= len(right) // 2:
            return ChunkSummary.from_bytes(right[:byte_offset])
        return (
            summary
            - self.left_summary
            - ChunkSummary.from_bytes(right[byte_offset:])
        )

    def _summarize_range_direct(
        self, start: int, end: int, summary: ChunkSummary
    ) -> ChunkSummary:
        len_left = self.len_left()
        if end <= len_left:
            return ChunkSummary.from_bytes(self._left_bytes()[start:end])
        if start <= len_left:
            return ChunkSummary.from_bytes(
                self._left_bytes()[start:]
            ) + self._summarize_right_up_to(end - len_left, summary)
        return ChunkSummary.from_bytes(
            self._right_bytes()[start - len_left:end - len_left]
        )