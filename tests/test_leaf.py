import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from gaprope.bounds import NotCharBoundaryError, StartAfterEndError
from gaprope.gap_buffer import GapBuffer
from gaprope.leaf import (
    balance_leaves,
    is_underfilled,
    remove_leaf_prefix,
    replace_in_leaf,
    replace_overflowing,
    resegmented_buffers,
)
from gaprope.summary import ChunkSummary


@pytest.mark.parametrize(
    "segments, expected",
    [
        (["aaaa", "b"], ["aaaa", "b"]),
        (["a", "a", "bcdefgh"], ["aabc", "defg", "h"]),
        (["a", "abcdefgh", "b"], ["aabc", "defg", "hb"]),
        (["a", "b"], ["ab"]),
        (["a", "b", ""], ["ab"]),
        (["こんい"], ["こ", "ん", "い"]),
        ([" 🌎", "!"], [" ", "🌎", "!"]),
    ],
)
def test_resegmented_buffers(segments, expected):
    buffers = list(resegmented_buffers(segments, 4))
    assert [b.left_chunk() + b.right_chunk() for b in buffers] == expected
    for buffer in buffers:
        assert buffer.summarize() == ChunkSummary.from_bytes(
            buffer.left_chunk() + buffer.right_chunk()
        )


def test_replace_overflowing_example():
    buffer = GapBuffer.from_text("foo\nbar", 10)
    summary = buffer.summarize()
    new_summary, extras = replace_overflowing(
        buffer, 3, 4, "foo\nbar\r\nbaz", summary
    )
    assert buffer == "foo"
    assert new_summary == buffer.summarize()
    assert extras == ["foo\nbar\r\nb", "azbar"]


def test_replace_overflowing_rejects_fitting_replacement():
    buffer = GapBuffer.from_text("abc", 10)
    with pytest.raises(ValueError):
        replace_overflowing(buffer, 0, 1, "x", buffer.summarize())


def test_is_underfilled():
    small = GapBuffer.from_text("a", 10)
    big = GapBuffer.from_text("abc", 10)
    assert is_underfilled(small, small.summarize()) is True
    assert is_underfilled(big, big.summarize()) is False


def test_balance_leaves_merges_when_both_fit():
    left = GapBuffer.from_text("ab", 10)
    right = GapBuffer.from_text("cd", 10)
    ls, rs = balance_leaves(left, left.summarize(), right, right.summarize())
    assert left == "abcd"
    assert right == ""
    assert ls == ChunkSummary.from_bytes("abcd")
    assert rs == ChunkSummary()


def test_balance_leaves_fills_left_from_right():
    left = GapBuffer.from_text("a", 10)
    right = GapBuffer.from_text("bcdefghijk", 10)
    ls, rs = balance_leaves(left, left.summarize(), right, right.summarize())
    assert left == "ab"
    assert right == "cdefghijk"
    assert ls == left.summarize()
    assert rs == right.summarize()


def test_balance_leaves_fills_right_from_left():
    left = GapBuffer.from_text("abcdefghij", 10)
    right = GapBuffer.from_text("k", 10)
    ls, rs = balance_leaves(left, left.summarize(), right, right.summarize())
    assert left == "abcdefghi"
    assert right == "jk"
    assert ls == left.summarize()
    assert rs == right.summarize()


def test_balance_leaves_leaves_balanced_pair_alone():
    left = GapBuffer.from_text("abcdef", 10)
    right = GapBuffer.from_text("ghijkl", 10)
    ls, rs = balance_leaves(left, left.summarize(), right, right.summarize())
    assert left == "abcdef"
    assert right == "ghijkl"
    assert (ls, rs) == (left.summarize(), right.summarize())


def test_replace_in_leaf_non_overflowing():
    buffer = GapBuffer.from_text("hello", 10)
    summary, extras = replace_in_leaf(buffer, buffer.summarize(), 1, 3, "EY")
    assert buffer == "hEYlo"
    assert extras is None
    assert summary == ChunkSummary.from_bytes("hEYlo")


def test_replace_in_leaf_insert():
    buffer = GapBuffer.from_text("ac", 10)
    summary, extras = replace_in_leaf(buffer, buffer.summarize(), 1, 1, "b\n")
    assert buffer == "ab\nc"
    assert extras is None
    assert summary.line_breaks == 1


def test_replace_in_leaf_overflowing():
    buffer = GapBuffer.from_text("hello", 10)
    summary, extras = replace_in_leaf(buffer, buffer.summarize(), 5, 5, " world")
    assert buffer == "hello"
    assert summary == ChunkSummary.from_bytes("hello")
    assert extras == [" world"]


def test_replace_in_leaf_open_range():
    buffer = GapBuffer.from_text("hello", 10)
    summary, extras = replace_in_leaf(buffer, buffer.summarize(), 2, None, "y")
    assert buffer == "hey"
    assert extras is None
    assert summary.bytes == 3


def test_replace_in_leaf_not_char_boundary():
    buffer = GapBuffer.from_text("é", 10)
    with pytest.raises(NotCharBoundaryError):
        replace_in_leaf(buffer, buffer.summarize(), 1, 2, "x")


def test_replace_in_leaf_start_after_end():
    buffer = GapBuffer.from_text("abc", 10)
    with pytest.raises(StartAfterEndError):
        replace_in_leaf(buffer, buffer.summarize(), 2, 1, "x")


def test_remove_leaf_prefix():
    buffer = GapBuffer.from_text("foo\nbar", 10)
    summary = remove_leaf_prefix(buffer, buffer.summarize(), 4)
    assert buffer == "bar"
    assert summary == ChunkSummary.from_bytes("bar")


_ALPHABET = st.sampled_from(list("ab\n\ré€🌎"))


@settings(max_examples=200, deadline=None)
@given(data=st.data())
def test_replace_in_leaf_preserves_text(data):
    max_bytes = 16
    chars = data.draw(st.lists(_ALPHABET, max_size=16))
    while len("".join(chars).encode("utf-8")) > max_bytes:
        chars.pop()
    text = "".join(chars)
    i = data.draw(st.integers(0, len(chars)))
    j = data.draw(st.integers(i, len(chars)))
    replacement = "".join(data.draw(st.lists(_ALPHABET, max_size=20)))

    buffer = GapBuffer.from_text(text, max_bytes)
    start = len("".join(chars[:i]).encode("utf-8"))
    end = len("".join(chars[:j]).encode("utf-8"))

    summary, extras = replace_in_leaf(
        buffer, buffer.summarize(), start, end, replacement
    )

    expected = "".join(chars[:i]) + replacement + "".join(chars[j:])
    content = buffer.left_chunk() + buffer.right_chunk()
    for extra in extras or []:
        assert 0 < len(extra) <= max_bytes
        assert len(extra) >= extra.chunk_min()
        content += extra.left_chunk() + extra.right_chunk()
    assert content == expected
    assert summary == buffer.summarize()
    assert len(buffer) <= max_bytes