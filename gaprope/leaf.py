"""Gap buffers used as the leaves of a rope: replacing text inside a leaf
(spilling into extra leaves when it overflows) and rebalancing neighbours."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Tuple

from .bounds import check_range, resolve_range
from .gap_buffer import GapBuffer
from .segmenter import resegment, split_adjusted
from .summary import ChunkSummary, Text, _as_bytes


def resegmented_buffers(
    segments: Iterable[Text], max_bytes: int
) -> Iterator[GapBuffer]:
    """Yield gap buffers holding the concatenation of ``segments``, split
    the same way a single text would be split into leaves."""
    for chunk in resegment(segments, max_bytes):
        yield GapBuffer.from_text(chunk, max_bytes)


def replace_overflowing(
    buffer: GapBuffer, start: int, end: int, s: Text, summary: ChunkSummary
) -> Tuple[ChunkSummary, List[GapBuffer]]:
    """Replace ``start..end`` of ``buffer`` with ``s`` when the result no
    longer fits in one buffer.

    The buffer keeps a prefix of the result and the rest is returned as new
    buffers, none of which is underfilled. Returns the buffer's new summary
    and the extra buffers. ``summary`` is the buffer's current summary.
    """
    data = _as_bytes(s)
    length = len(buffer)
    max_bytes = buffer.max_bytes

    check_range("byte", start, end, length)
    buffer.assert_char_boundary(start)
    buffer.assert_char_boundary(end)
    if length - (end - start) + len(data) <= max_bytes:
        raise ValueError("the replacement fits in the buffer: nothing overflows")

    left = buffer.left_chunk().encode("utf-8")
    right = buffer.right_chunk().encode("utf-8")
    len_left = buffer.len_left()

    if end <= len_left:
        extra_left, extra_right = left[end:], right
    else:
        extra_left, extra_right = b"", right[end - len_left:]

    minimum = buffer.min_bytes()

    if start < minimum:
        replacement = data
        truncate_from = end
        missing = minimum - start

        if len(data) >= missing:
            kept, rest = split_adjusted(data, missing, True)
            replacement = kept
            extras = list(
                resegmented_buffers([rest, extra_left, extra_right], max_bytes)
            )
        elif len(data) + len(extra_left) >= missing:
            missing -= len(data)
            kept, rest = split_adjusted(extra_left, missing, True)
            truncate_from += len(kept)
            extras = list(resegmented_buffers([rest, extra_right], max_bytes))
        else:
            missing -= len(data) + len(extra_left)
            kept, rest = split_adjusted(extra_right, missing, True)
            truncate_from += len(extra_left) + len(kept)
            extras = list(resegmented_buffers([rest], max_bytes))

        summary = buffer.truncate_from(truncate_from, summary)
        new_summary = buffer.replace_non_overflowing(
            start, end, replacement, summary
        )
        return new_summary, extras

    if len(data) + (length - end) < minimum:
        missing = minimum - len(data) - (length - end)

        if start <= len_left:
            new_left, new_right = left[:start], b""
        else:
            new_left, new_right = left, right[: start - len_left]

        if missing <= len(new_right):
            keep, moved = split_adjusted(
                new_right, len(new_right) - missing, True
            )
            truncate_from = len(new_left) + len(keep)
            first, second = b"", moved
        else:
            missing -= len(new_right)
            keep, moved = split_adjusted(
                new_left, len(new_left) - missing, True
            )
            truncate_from = len(keep)
            first, second = moved, new_right

        extras = list(
            resegmented_buffers(
                [first, second, data, extra_left, extra_right], max_bytes
            )
        )
        new_summary = buffer.truncate_from(truncate_from, summary)
        return new_summary, extras

    extras = list(
        resegmented_buffers([data, extra_left, extra_right], max_bytes)
    )
    new_summary = buffer.truncate_from(start, summary)
    return new_summary, extras


def is_underfilled(buffer: GapBuffer, summary: ChunkSummary) -> bool:
    """Return ``True`` if a leaf with this summary holds too few bytes."""
    return summary.bytes < buffer.min_bytes()


def balance_leaves(
    left: GapBuffer,
    left_summary: ChunkSummary,
    right: GapBuffer,
    right_summary: ChunkSummary,
) -> Tuple[ChunkSummary, ChunkSummary]:
    """Rebalance two neighbouring leaves and return their new summaries.

    If both fit in one buffer everything moves to ``left``; otherwise an
    underfilled side takes text from the other.
    """
    minimum = left.min_bytes()

    if len(left) + len(right) <= left.max_bytes:
        left.append_other(left_summary, right)
        return left_summary + right_summary, ChunkSummary()

    if len(left) < minimum:
        moved = left.add_from_right(minimum - len(left), right)
        return left_summary + moved, right_summary - moved

    if len(right) < minimum:
        moved = left.move_to_right(minimum - len(right), right, left_summary)
        return left_summary - moved, right_summary + moved

    return left_summary, right_summary


def replace_in_leaf(
    buffer: GapBuffer,
    summary: ChunkSummary,
    start: Optional[int],
    end: Optional[int],
    replacement: Text,
) -> Tuple[ChunkSummary, Optional[List[GapBuffer]]]:
    """Replace the byte range ``start..end`` of a leaf with ``replacement``.

    A missing ``start`` or ``end`` means the start or end of the buffer.
    Returns the new summary and, if the result overflowed, the extra leaves
    that follow the buffer; otherwise ``None``.
    """
    data = _as_bytes(replacement)
    start, end = resolve_range(start, end, 0, len(buffer))
    check_range("byte", start, end, len(buffer))
    buffer.assert_char_boundary(start)
    buffer.assert_char_boundary(end)

    if len(buffer) - (end - start) + len(data) <= buffer.max_bytes:
        if end > start:
            new_summary = buffer.replace_non_overflowing(start, end, data, summary)
        else:
            new_summary = buffer.insert(start, data, summary)
        return new_summary, None

    return replace_overflowing(buffer, start, end, data, summary)


def remove_leaf_prefix(
    buffer: GapBuffer, summary: ChunkSummary, up_to: int
) -> ChunkSummary:
    """Remove the first ``up_to`` bytes of a leaf and return its new summary."""
    new_summary, _ = replace_in_leaf(buffer, summary, None, up_to, b"")
    return new_summary