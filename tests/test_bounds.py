import pytest
from hypothesis import given
from hypothesis import strategies as st

from gaprope.bounds import (
    NotCharBoundaryError,
    OutOfBoundsError,
    RopeError,
    StartAfterEndError,
    check_char_boundary,
    check_index,
    check_offset,
    check_range,
    resolve_range,
)


def test_resolve_range_fills_missing_ends():
    assert resolve_range(None, None, 0, 32) == (0, 32)
    assert resolve_range(None, 2, 0, 32) == (0, 2)
    assert resolve_range(4, None, 0, 7) == (4, 7)
    assert resolve_range(4, 7, 0, 12) == (4, 7)


def test_check_index_accepts_valid_and_rejects_end():
    text = "bar"
    for i in range(len(text)):
        check_index("byte", i, len(text))
    with pytest.raises(OutOfBoundsError) as info:
        check_index("byte", len(text), len(text))
    assert info.value.value == len(text)
    assert info.value.length == len(text)
    assert info.value.kind == "byte"


def test_check_index_negative():
    with pytest.raises(OutOfBoundsError):
        check_index("line", -1, 3)


def test_out_of_bounds_is_index_error():
    with pytest.raises(IndexError) as info:
        check_index("line", 5, 5)
    assert isinstance(info.value, RopeError)
    assert "line index" in str(info.value)


def test_check_offset_allows_length():
    check_offset("byte", 4, 4)
    with pytest.raises(OutOfBoundsError) as info:
        check_offset("byte", 5, 4)
    assert info.value.what == "offset"
    assert "byte offset" in str(info.value)


def test_check_range_start_after_end():
    with pytest.raises(StartAfterEndError) as info:
        check_range("byte", 7, 4, 11)
    assert (info.value.start, info.value.end) == (7, 4)
    assert isinstance(info.value, ValueError)


def test_check_range_start_after_end_reported_before_bounds():
    with pytest.raises(StartAfterEndError):
        check_range("line", 20, 15, 3)


def test_check_range_end_out_of_bounds():
    with pytest.raises(OutOfBoundsError) as info:
        check_range("utf16", 0, 9, 8)
    assert info.value.value == 9


def test_check_range_valid_ranges_pass():
    for start, end in [(0, 0), (0, 11), (11, 11), (3, 5)]:
        check_range("byte", start, end, 11)
    with pytest.raises(OutOfBoundsError):
        check_range("byte", 0, 12, 11)


def test_char_boundary_documented_example():
    text = "Löwe 老虎 Léopard"
    length = len(text.encode("utf-8"))
    check_char_boundary(text, 0)
    check_char_boundary(text, length)
    check_char_boundary(text, 6)
    with pytest.raises(NotCharBoundaryError) as info:
        check_char_boundary(text, 2)
    assert info.value.char == "ö"
    assert info.value.char_start == 1
    assert info.value.byte_offset == 2


def test_char_boundary_inside_emoji():
    text = "🗻∈🌏"
    check_char_boundary(text, 4)
    check_char_boundary(text, 7)
    with pytest.raises(NotCharBoundaryError) as info:
        check_char_boundary(text, 5)
    assert info.value.char == "∈"
    assert info.value.char_start == 4


def test_char_boundary_out_of_bounds():
    with pytest.raises(OutOfBoundsError):
        check_char_boundary(b"bar", 4)


@given(st.text(), st.integers(min_value=0, max_value=64))
def test_char_boundary_matches_decoding(text, offset):
    raw = text.encode("utf-8")
    if offset > len(raw):
        with pytest.raises(OutOfBoundsError):
            check_char_boundary(raw, offset)
        return
    try:
        raw[:offset].decode("utf-8")
        raw[offset:].decode("utf-8")
        expected = True
    except UnicodeDecodeError:
        expected = False
    try:
        check_char_boundary(raw, offset)
        got = True
    except NotCharBoundaryError as err:
        got = False
        assert err.char_start < offset
        assert text.encode("utf-8")[err.char_start:].decode(
            "utf-8"
        ).startswith(err.char)
    assert got == expected