"""Incremental construction of ropes from many small pieces of text."""

from __future__ import annotations

from typing import List

from .gap_buffer import GapBuffer
from .rope import CHUNK_MAX_BYTES, Rope, _to_utf8
from .segmenter import split_adjusted
from .summary import Text


class RopeBuilder:
    """Builds a :class:`Rope` by appending text piece by piece."""

    def __init__(self) -> None:
        self._leaves: List[GapBuffer] = []
        self._pending = bytearray()

    def append(self, text: Text) -> "RopeBuilder":
        """Append ``text`` to the end of the rope being built."""
        data = _to_utf8(text)
        while data:
            space = CHUNK_MAX_BYTES - len(self._pending)
            push, rest = split_adjusted(data, space, False)
            self._pending += push
            if not rest:
                break
            self._flush()
            data = rest
        return self

    def build(self) -> Rope:
        """Return the rope built so far and reset the builder."""
        self._flush()
        rope = Rope.from_leaves(self._leaves)
        self._leaves = []
        return rope

    def _flush(self) -> None:
        if self._pending:
            self._leaves.append(
                GapBuffer.from_text(bytes(self._pending), CHUNK_MAX_BYTES)
            )
            self._pending = bytearray()