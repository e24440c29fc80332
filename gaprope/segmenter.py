"""Splitting UTF-8 text into chunks that fit in fixed-size leaves.

Chunk boundaries always fall on character boundaries. Each chunk holds at
most ``max_bytes`` bytes. Apart from a text that is too short to begin with,
no chunk is left with fewer than ``chunk_min(max_bytes)`` bytes.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Tuple

from .summary import Text, _as_bytes


def is_char_boundary(data: Text, byte_offset: int) -> bool:
    """Return ``True`` if ``byte_offset`` is a character boundary of the
    UTF-8 ``data``.

    The start and the end of ``data`` are always boundaries. Offsets outside
    ``0..=len(data)`` never are.
    """
    raw = _as_bytes(data)
    if byte_offset < 0 or byte_offset > len(raw):
        return False
    if byte_offset == len(raw):
        return True
    return raw[byte_offset] & 0xC0 != 0x80


def adjust_split_point(data: Text, offset: int, round_up: bool) -> int:
    """Move ``offset`` to the nearest character boundary of ``data``.

    The offset moves forward if ``round_up`` is true and backward otherwise.
    Offsets past the end are clamped to the length of ``data``.
    """
    raw = _as_bytes(data)
    if offset >= len(raw):
        return len(raw)
    offset = max(offset, 0)
    step = 1 if round_up else -1
    while not is_char_boundary(raw, offset):
        offset += step
    return offset


def split_adjusted(
    data: Text, offset: int, round_up: bool
) -> Tuple[bytes, bytes]:
    """Split ``data`` at ``offset`` after moving the offset to a character
    boundary (see :func:`adjust_split_point`)."""
    raw = _as_bytes(data)
    split = adjust_split_point(raw, offset, round_up)
    return raw[:split], raw[split:]


def min_bytes(max_bytes: int) -> int:
    """The number of bytes below which a leaf counts as underfilled."""
    return max_bytes // 4


def chunk_min(max_bytes: int) -> int:
    """The number of bytes every chunk must reach.

    A leaf can be up to 3 bytes short of :func:`min_bytes` when a split
    lands inside a 4-byte character.
    """
    return max(min_bytes(max_bytes) - 3, 0)


def segment(data: Text, max_bytes: int) -> Iterator[bytes]:
    """Yield consecutive chunks of ``data`` for leaves of ``max_bytes``.

    If ``data`` is shorter than one leaf, it is yielded whole as one chunk.
    """
    raw = _as_bytes(data)
    minimum = min_bytes(max_bytes)
    yielded = 0
    while yielded < len(raw):
        remaining = len(raw) - yielded
        rest = raw[yielded:]
        if remaining > max_bytes:
            if remaining - max_bytes >= minimum:
                chunk_len = max_bytes
            else:
                # Leave exactly `minimum` bytes for what comes after.
                chunk_len = remaining - minimum
            adjusted = adjust_split_point(rest, chunk_len, False)
            if adjusted == 0:
                adjusted = adjust_split_point(rest, chunk_len, True)
            chunk = rest[:adjusted]
        else:
            chunk = rest
        yielded += len(chunk)
        yield chunk


def resegment(segments: Iterable[Text], max_bytes: int) -> Iterator[bytes]:
    """Yield chunks for leaves of ``max_bytes`` from several pieces of text.

    The pieces are treated as one text that is their concatenation. Each
    yielded chunk is the joined bytes that would go into one leaf.
    """
    parts: List[bytes] = [_as_bytes(s) for s in segments]
    total = sum(len(p) for p in parts)
    minimum = min_bytes(max_bytes)
    start = 0
    yielded = 0

    while yielded < total:
        remaining = total - yielded

        if remaining > max_bytes:
            idx_last = start
            bytes_in_next = 0

            for idx, part in enumerate(parts[start:]):
                new_bytes_in_next = bytes_in_next + len(part)
                next_too_big = new_bytes_in_next > max_bytes
                rest_too_small = remaining - new_bytes_in_next < minimum
                if next_too_big or rest_too_small:
                    idx_last += idx
                    break
                bytes_in_next = new_bytes_in_next

            last_part_len = max_bytes - bytes_in_next
            if remaining - bytes_in_next < last_part_len + minimum:
                last_part_len = remaining - bytes_in_next - minimum

            left, right = split_adjusted(parts[idx_last], last_part_len, False)

            # Rounding down can leave nothing at all to yield, e.g. a 4-byte
            # character followed by more text with very small leaves.
            before = sum(len(p) for p in parts[start:idx_last])
            if before + len(left) == 0:
                left, right = split_adjusted(
                    parts[idx_last], last_part_len, True
                )

            chunk = b"".join(parts[start:idx_last]) + left
            parts[idx_last] = right
            start = idx_last
        else:
            chunk = b"".join(parts[start:])

        yielded += len(chunk)
        yield chunk