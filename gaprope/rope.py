"""A UTF-8 text rope made of fixed-capacity gap buffer leaves."""

from __future__ import annotations

from bisect import bisect_left
from functools import reduce
from itertools import accumulate
from operator import add
from typing import Iterable, Iterator, List, Optional, Tuple

from .bounds import (
    NotCharBoundaryError,
    check_index,
    check_offset,
    check_range,
    resolve_range,
)
from .gap_buffer import GapBuffer
from .leaf import balance_leaves, is_underfilled, remove_leaf_prefix, replace_in_leaf
from .metrics import Metric
from .segmenter import segment
from .summary import ChunkSummary, Text

CHUNK_MAX_BYTES = 2048


def _to_utf8(text: Text) -> bytes:
    """Encode ``text`` as UTF-8, validating byte input."""
    if isinstance(text, str):
        return text.encode("utf-8")
    data = bytes(text)
    data.decode("utf-8")
    return data


def _leaf_bytes(leaf: GapBuffer) -> bytes:
    return (leaf.left_chunk() + leaf.right_chunk()).encode("utf-8")


def _total(summaries: Iterable[ChunkSummary]) -> ChunkSummary:
    return reduce(add, summaries, ChunkSummary())


class Rope:
    """A UTF-8 text rope supporting cheap edits anywhere in the text.

    Positions are byte offsets unless stated otherwise. Slicing returns a
    new, independent ``Rope``.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, text: Text = "") -> None:
        data = _to_utf8(text)
        leaves = [
            GapBuffer.from_text(chunk, CHUNK_MAX_BYTES)
            for chunk in segment(data, CHUNK_MAX_BYTES)
        ]
        self._set_leaves(leaves, CHUNK_MAX_BYTES)

    # ----- construction -------------------------------------------------

    @classmethod
    def from_leaves(cls, leaves: Iterable[GapBuffer]) -> "Rope":
        """Build a rope that takes ownership of the given gap buffers.

        Empty buffers are dropped and underfilled ones are rebalanced. All
        buffers must share the same capacity, which the rope then uses for
        its leaves.
        """
        kept = [leaf for leaf in leaves if len(leaf) > 0]
        capacities = {leaf.max_bytes for leaf in kept}
        if len(capacities) > 1:
            raise ValueError(
                f"all leaves must have the same capacity, got "
                f"{sorted(capacities)}"
            )
        max_bytes = capacities.pop() if capacities else CHUNK_MAX_BYTES
        rope = cls.__new__(cls)
        rope._set_leaves(kept, max_bytes)
        rope._rebalance(0, len(rope._leaves))
        rope._refresh()
        return rope

    @classmethod
    def _from_bytes(cls, data: bytes, max_bytes: int) -> "Rope":
        rope = cls.__new__(cls)
        leaves = [
            GapBuffer.from_text(chunk, max_bytes)
            for chunk in segment(data, max_bytes)
        ]
        rope._set_leaves(leaves, max_bytes)
        return rope

    def _set_leaves(self, leaves: List[GapBuffer], max_bytes: int) -> None:
        self._max_bytes = max_bytes
        self._leaves = leaves
        self._summaries = [leaf.summarize() for leaf in leaves]
        self._has_trailing_newline = bool(leaves) and leaves[
            -1
        ].has_trailing_newline()
        self._refresh()

    def _refresh(self) -> None:
        self._ends = list(accumulate(len(leaf) for leaf in self._leaves))
        self._summary = _total(self._summaries)

    def copy(self) -> "Rope":
        """Return an independent copy of this rope."""
        rope = type(self).__new__(type(self))
        rope._max_bytes = self._max_bytes
        rope._leaves = [
            GapBuffer.from_chunks(
                [leaf.left_chunk(), leaf.right_chunk()], leaf.max_bytes
            )
            for leaf in self._leaves
        ]
        rope._summaries = list(self._summaries)
        rope._has_trailing_newline = self._has_trailing_newline
        rope._refresh()
        return rope

    # ----- dunders ------------------------------------------------------

    def __str__(self) -> str:
        return "".join(self.chunks())

    def __repr__(self) -> str:
        return f"Rope({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Rope):
            return (
                self.byte_len() == other.byte_len()
                and self.line_len() == other.line_len()
                and str(self) == str(other)
            )
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented

    # ----- invariants ---------------------------------------------------

    def assert_invariants(self) -> None:
        """Raise ``AssertionError`` if the internal structure is broken."""
        for leaf, summary in zip(self._leaves, self._summaries):
            if leaf.max_bytes != self._max_bytes:
                raise AssertionError(f"leaf {leaf!r} has the wrong capacity")
            if summary != leaf.summarize():
                raise AssertionError(f"stale summary for leaf {leaf!r}")
            if len(leaf) == 0:
                raise AssertionError("the rope holds an empty leaf")
        if len(self._leaves) != len(self._summaries):
            raise AssertionError("leaves and summaries are out of step")
        expected_trailing = bool(self._leaves) and self._leaves[
            -1
        ].has_trailing_newline()
        if self._has_trailing_newline != expected_trailing:
            raise AssertionError("the trailing newline flag is stale")
        if self._ends != list(accumulate(len(l) for l in self._leaves)):
            raise AssertionError("the leaf offsets are stale")
        if self._summary != _total(self._summaries):
            raise AssertionError("the total summary is stale")
        if len(self._leaves) > 1:
            for leaf in self._leaves:
                if len(leaf) < leaf.chunk_min():
                    raise AssertionError(
                        f"the chunk {leaf!r} was supposed to contain at "
                        f"least {leaf.chunk_min()} bytes but actually "
                        f"contains {len(leaf)}"
                    )

    # ----- measurements -------------------------------------------------

    def byte_len(self) -> int:
        """The length of the rope in bytes."""
        return self._summary.bytes

    def is_empty(self) -> bool:
        """Return ``True`` if the rope holds no text."""
        return self.byte_len() == 0

    def line_len(self) -> int:
        """The number of lines; a final line break doesn't add an empty
        line."""
        return (
            self._summary.line_breaks
            + 1
            - int(self._has_trailing_newline)
            - int(self.is_empty())
        )

    def utf16_len(self) -> int:
        """The number of UTF-16 code units the text would take."""
        return self._summary.utf16_code_units

    # ----- reading ------------------------------------------------------

    def chunks(self) -> Iterator[str]:
        """Yield the text of the rope as consecutive non-empty strings."""
        for leaf in self._leaves:
            left, right = leaf.left_chunk(), leaf.right_chunk()
            if left:
                yield left
            if right:
                yield right

    def byte(self, byte_index: int) -> int:
        """Return the byte at ``byte_index``."""
        check_index("byte", byte_index, self.byte_len())
        idx, _ = self._locate(byte_index + 1)
        start = self._ends[idx] - len(self._leaves[idx])
        return self._leaves[idx].byte(byte_index - start)

    def is_char_boundary(self, byte_offset: int) -> bool:
        """Return ``True`` if ``byte_offset`` lies on a character boundary."""
        check_offset("byte", byte_offset, self.byte_len())
        if not self._leaves:
            return True
        idx, offset = self._locate(byte_offset)
        return self._leaves[idx].is_char_boundary(offset)

    def byte_of_line(self, line_offset: int) -> int:
        """Byte offset of the start of the given line."""
        check_offset("line", line_offset, self.line_len())
        if line_offset > self._summary.line_breaks:
            return self.byte_len()
        return self._to_byte_offset(Metric.RAW_LINE, line_offset)

    def line_of_byte(self, byte_offset: int) -> int:
        """The line offset of the given byte offset."""
        check_offset("byte", byte_offset, self.byte_len())
        return self._measure_at(Metric.RAW_LINE, byte_offset)

    def byte_of_utf16_code_unit(self, utf16_offset: int) -> int:
        """Byte offset of the given UTF-16 code unit offset."""
        check_offset("utf16", utf16_offset, self.utf16_len())
        return self._to_byte_offset(Metric.UTF16, utf16_offset)

    def utf16_code_unit_of_byte(self, byte_offset: int) -> int:
        """UTF-16 code unit offset of the given byte offset."""
        check_offset("byte", byte_offset, self.byte_len())
        return self._measure_at(Metric.UTF16, byte_offset)

    # ----- slicing ------------------------------------------------------

    def byte_slice(
        self, start: Optional[int] = None, end: Optional[int] = None
    ) -> "Rope":
        """Return the text in the byte range ``start..end`` as a new rope."""
        start, end = resolve_range(start, end, 0, self.byte_len())
        check_range("byte", start, end, self.byte_len())
        self._check_char_boundary(start)
        self._check_char_boundary(end)
        return self._slice(start, end)

    def line_slice(
        self, start: Optional[int] = None, end: Optional[int] = None
    ) -> "Rope":
        """Return the lines ``start..end``, line breaks included."""
        start, end = resolve_range(start, end, 0, self.line_len())
        check_range("line", start, end, self.line_len())
        return self._slice(self.byte_of_line(start), self.byte_of_line(end))

    def utf16_slice(
        self, start: Optional[int] = None, end: Optional[int] = None
    ) -> "Rope":
        """Return the text in the UTF-16 code unit range ``start..end``."""
        start, end = resolve_range(start, end, 0, self.utf16_len())
        check_range("utf16", start, end, self.utf16_len())
        return self._slice(
            self._to_byte_offset(Metric.UTF16, start),
            self._to_byte_offset(Metric.UTF16, end),
        )

    def line(self, line_index: int) -> "Rope":
        """Return the line at ``line_index`` without its terminator."""
        check_index("line", line_index, self.line_len())
        data = self._slice_bytes(
            self.byte_of_line(line_index), self.byte_of_line(line_index + 1)
        )
        if data.endswith(b"\n"):
            data = data[:-1]
            if data.endswith(b"\r"):
                data = data[:-1]
        return Rope._from_bytes(data, self._max_bytes)

    # ----- editing ------------------------------------------------------

    def insert(self, byte_offset: int, text: Text) -> None:
        """Insert ``text`` at ``byte_offset``."""
        self.replace(byte_offset, byte_offset, text)

    def delete(
        self, start: Optional[int] = None, end: Optional[int] = None
    ) -> None:
        """Delete the text in the byte range ``start..end``."""
        self.replace(start, end, "")

    def replace(
        self, start: Optional[int], end: Optional[int], text: Text
    ) -> None:
        """Replace the byte range ``start..end`` with ``text``.

        A missing ``start`` or ``end`` means the start or end of the rope.
        """
        data = _to_utf8(text)
        length = self.byte_len()
        start, end = resolve_range(start, end, 0, length)
        check_range("byte", start, end, length)
        self._check_char_boundary(start)
        self._check_char_boundary(end)

        update_trailing = False
        if end == length:
            if data:
                self._has_trailing_newline = data.endswith(b"\n")
            elif start == 0:
                self._has_trailing_newline = False
            else:
                update_trailing = True

        self._replace_bytes(start, end, data)

        if update_trailing:
            self._has_trailing_newline = bool(self._leaves) and self._leaves[
                -1
            ].has_trailing_newline()

    # ----- internals ----------------------------------------------------

    def _locate(self, byte_offset: int) -> Tuple[int, int]:
        """Index of the first leaf ending at or after ``byte_offset`` and the
        offset inside it."""
        idx = bisect_left(self._ends, byte_offset)
        start = self._ends[idx] - len(self._leaves[idx])
        return idx, byte_offset - start

    def _check_char_boundary(self, byte_offset: int) -> None:
        if self.is_char_boundary(byte_offset):
            return
        char_start = byte_offset
        while not self.is_char_boundary(char_start):
            char_start -= 1
        char_end = byte_offset
        while not self.is_char_boundary(char_end):
            char_end += 1
        char = self._slice_bytes(char_start, char_end).decode("utf-8")
        raise NotCharBoundaryError(byte_offset, char, char_start)

    def _to_byte_offset(self, metric: Metric, offset: int) -> int:
        if offset == 0:
            return 0
        acc = ChunkSummary()
        for leaf, summary in zip(self._leaves, self._summaries):
            before = metric.measure(acc)
            if before + metric.measure(summary) >= offset:
                return acc.bytes + metric.to_byte_offset(
                    _leaf_bytes(leaf), offset - before
                )
            acc = acc + summary
        return self.byte_len()

    def _measure_at(self, metric: Metric, byte_offset: int) -> int:
        if not self._leaves:
            return 0
        idx, offset = self._locate(byte_offset)
        before = _total(self._summaries[:idx])
        inside = Metric.BYTE.summary_up_to(
            _leaf_bytes(self._leaves[idx]), self._summaries[idx], offset, offset
        )
        return metric.measure(before + inside)

    def _slice_bytes(self, start: int, end: int) -> bytes:
        if start >= end:
            return b""
        idx, _ = self._locate(start)
        pos = self._ends[idx] - len(self._leaves[idx])
        out = bytearray()
        for leaf in self._leaves[idx:]:
            content = _leaf_bytes(leaf)
            lo = max(start - pos, 0)
            hi = min(end - pos, len(content))
            if lo < hi:
                out += content[lo:hi]
            pos += len(content)
            if pos >= end:
                break
        return bytes(out)

    def _slice(self, start: int, end: int) -> "Rope":
        return Rope._from_bytes(self._slice_bytes(start, end), self._max_bytes)

    def _replace_bytes(self, start: int, end: int, data: bytes) -> None:
        leaves, sums = self._leaves, self._summaries

        if not leaves:
            if data:
                self._set_leaves(
                    [
                        GapBuffer.from_text(chunk, self._max_bytes)
                        for chunk in segment(data, self._max_bytes)
                    ],
                    self._max_bytes,
                )
            return

        i, start_offset = self._locate(start)
        j, end_offset = self._locate(end)

        if i == j:
            new_summary, extras = replace_in_leaf(
                leaves[i], sums[i], start_offset, end_offset, data
            )
            sums[i] = new_summary
            extras = extras or []
            hi = i + 1 + len(extras)
        else:
            sums[j] = remove_leaf_prefix(leaves[j], sums[j], end_offset)
            del leaves[i + 1:j]
            del sums[i + 1:j]
            new_summary, extras = replace_in_leaf(
                leaves[i], sums[i], start_offset, None, data
            )
            sums[i] = new_summary
            extras = extras or []
            hi = i + 2 + len(extras)

        leaves[i + 1:i + 1] = extras
        sums[i + 1:i + 1] = [leaf.summarize() for leaf in extras]

        self._rebalance(i, hi)

        if len(leaves) == 1 and len(leaves[0]) == 0:
            leaves.clear()
            sums.clear()
        self._refresh()

    def _rebalance(self, lo: int, hi: int) -> None:
        """Fix underfilled leaves in ``lo..hi`` by balancing them with a
        neighbour."""
        leaves, sums = self._leaves, self._summaries
        idx = max(lo, 0)
        while len(leaves) > 1 and idx < min(hi, len(leaves)):
            if not is_underfilled(leaves[idx], sums[idx]):
                idx += 1
                continue
            left = idx if idx + 1 < len(leaves) else idx - 1
            right = left + 1
            sums[left], sums[right] = balance_leaves(
                leaves[left], sums[left], leaves[right], sums[right]
            )
            if len(leaves[right]) == 0:
                del leaves[right]
                del sums[right]
                if right < hi:
                    hi -= 1
                idx = left
            else:
                idx = right + 1