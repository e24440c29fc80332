from hypothesis import given, settings
from hypothesis import strategies as st

from gaprope.rope import Rope
from gaprope.rope_builder import RopeBuilder


def test_build_example():
    builder = RopeBuilder()
    builder.append("ƒoo\n").append("bär\r\n").append("baz")
    rope = builder.build()
    assert rope == "ƒoo\nbär\r\nbaz"
    assert rope.line_len() == 3


def test_append_returns_builder():
    builder = RopeBuilder()
    assert builder.append("a") is builder
    assert builder.build() == "a"


def test_poem():
    pieces = [
        "I am a 🦀\n",
        "Who walks the shore\n",
        "And pinches toes all day.\n",
        "\n",
        "If I were you\n",
        "I'd wear some 👟\n",
        "And not get in my way.\n",
    ]
    builder = RopeBuilder()
    for piece in pieces:
        builder.append(piece)
    rope = builder.build()
    rope.assert_invariants()
    assert rope == Rope("".join(pieces))
    assert rope.line(5) == "I'd wear some 👟"


def test_empty_build():
    rope = RopeBuilder().build()
    assert rope.is_empty()
    assert rope.line_len() == 0


def test_large_input_spans_many_leaves():
    builder = RopeBuilder()
    piece = "🌎 abc\n" * 100
    for _ in range(20):
        builder.append(piece)
    rope = builder.build()
    rope.assert_invariants()
    assert str(rope) == piece * 20
    assert len(list(rope.chunks())) > 1


def test_build_resets_builder():
    builder = RopeBuilder()
    builder.append("first")
    assert builder.build() == "first"
    builder.append("second")
    assert builder.build() == "second"


@settings(deadline=None)
@given(st.lists(st.text(max_size=3000), max_size=6))
def test_builder_matches_concatenation(pieces):
    builder = RopeBuilder()
    for piece in pieces:
        builder.append(piece)
    rope = builder.build()
    rope.assert_invariants()
    assert str(rope) == "".join(pieces)
    assert rope == Rope("".join(pieces))