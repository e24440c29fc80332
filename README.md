# gaprope

`gaprope` is a UTF-8 text rope. It is meant for programs that edit large
buffers often, such as text editors. The text is split into chunks of at most
2048 bytes. Each chunk is a small gap buffer, so repeated edits at one position
stay cheap.

## Installation

```
pip install gaprope
```

The package has no dependencies outside the standard library.

## Usage

```python
from gaprope.rope import Rope
from gaprope.rope_builder import RopeBuilder

builder = RopeBuilder()
builder.append("I am a 🦀\n").append("Who walks the shore\n")
builder.append("And pinches toes all day.\n")
rope = builder.build()

# Slices by byte offsets or by line offsets.
assert rope.byte_slice(None, 32) == "I am a 🦀\nWho walks the shore\n"
assert rope.line_slice(None, 2) == rope.byte_slice(None, 32)

# Single lines come back without their terminator.
assert rope.line(1) == "Who walks the shore"

# Edit using byte offsets.
start = rope.byte_of_line(1)
end = rope.byte_of_line(2)
rope.replace(start, end, "Who naps on the shore\n")
assert rope.line(1) == "Who naps on the shore"

# Chunks give the text as it is stored.
text = "".join(rope.chunks())
assert text == str(rope)
```

`Rope("text")` builds a rope directly from a string or from UTF-8 bytes.
`RopeBuilder.append` returns the builder, so calls can be chained. `build`
returns the rope and leaves the builder empty.

### The `Rope` class

- `insert(byte_offset, text)`, `delete(start, end)` and
  `replace(start, end, text)` edit the text. In ranges, `None` for `start` or
  `end` means the start or the end of the rope.
- `byte(byte_index)`, `byte_len()`, `line_len()`, `utf16_len()`, `is_empty()`
  and `is_char_boundary(byte_offset)` query it.
- `byte_of_line`, `line_of_byte`, `byte_of_utf16_code_unit` and
  `utf16_code_unit_of_byte` convert between offsets.
- `byte_slice`, `line_slice`, `utf16_slice` and `line` return parts of the
  text. Each returns a new, independent `Rope` and not a view.
- `chunks()` yields the stored text as non-empty strings, in order.
- `copy()` makes an independent snapshot.
- `str(rope)` gives the whole text. A rope compares equal to another rope or
  to a `str` with the same text.
- `assert_invariants()` raises `AssertionError` if the internal structure is
  inconsistent.

### Lower-level modules

- `gaprope.gap_buffer.GapBuffer` is a fixed-capacity gap buffer (at most
  65535 bytes) holding one leaf.
- `gaprope.leaf` replaces text inside a leaf, spilling into extra leaves when
  the leaf overflows, and rebalances neighbouring leaves.
- `gaprope.segmenter` splits UTF-8 text into leaf-sized chunks on character
  boundaries.
- `gaprope.summary.ChunkSummary` counts bytes, line breaks and UTF-16 code
  units. `gaprope.metrics.Metric` converts between those measures.

## Offsets and indexes

An *index* names one byte or one line. It goes from 0 up to one less than the
length. An *offset* names the boundary between two items. It goes from 0 up to
and including the length.

For example, inserting between the `a` and the `r` of `"bar"` uses byte offset
2.

The final line break is optional. It does not count as an extra empty line.
Both `\n` and `\r\n` end a line.

## Errors

Bad arguments raise exceptions from `gaprope.bounds`, all of them subclasses of
`RopeError`:

- `OutOfBoundsError` (also an `IndexError`) for an index or offset outside
  the text.
- `NotCharBoundaryError` (also a `ValueError`) for a byte offset that falls
  inside a UTF-8 code point.
- `StartAfterEndError` (also a `ValueError`) for a range whose start is after
  its end.

Bytes that are not valid UTF-8 raise `UnicodeDecodeError`.

## What it does not do

- There are no iterators over lines, bytes, characters or grapheme clusters.
  Use `line(i)` for `i` in `range(rope.line_len())`, or iterate over
  `str(rope)`.
- Slices copy their text; there is no borrowed slice type.
- The leaves are kept in a flat list, not a balanced tree, so locating a
  position costs a binary search and some operations walk all the leaves.

## Running the tests

```
pip install -e ".[test]"
pytest
```