# derivekit

A small set of class decorators that add behaviour to plain Python classes
from their declarations: packed bitfields, chainable builders, a structured
`repr`, and checks that enum members and `match` cases are written in
sorted order.

## Installation

```
pip install derivekit
```

To run the test suite:

```
pip install "derivekit[test]"
pytest
```

## Bitfields

`derivekit.bitfield.bitfield` turns a class whose annotations name
specifiers into a record packed into a byte buffer. Fields are laid out in
declaration order from the most significant bit of the first byte, and each
field becomes a property that reads and writes its bits. The total width must
be a multiple of eight bits; otherwise a `BitfieldError` is raised when the
class is decorated.

```python
from derivekit.bitfield import bitfield
from derivekit.specifiers import bit_width_type

B1, B3, B4, B24 = (bit_width_type(n) for n in (1, 3, 4, 24))

@bitfield
class MyFourBytes:
    a: B1
    b: B3
    c: B4
    d: B24

x = MyFourBytes()
x.c = 14
assert x.c == 14
assert MyFourBytes.byte_size == 4
assert bytes(x) == b"\x0e\x00\x00\x00"
```

Instances start zeroed. The constructor also takes the raw bytes, or field
values as keyword arguments (`MyFourBytes(c=14)`); `MyFourBytes.from_bytes(data)`
builds an instance from bytes of the right length. Instances compare equal
when their bytes are equal, and their `repr` lists every field.

### Specifiers

`derivekit.specifiers` holds the field types:

- `bit_width_type(n)` returns the unsigned integer specifier `B<n>` for
  1 to 64 bits. Its accessor is an `int` held in 1, 2, 4 or 8 bytes.
- `bool` may be used directly as a one-bit field.
- An `enum.Enum` subclass may be used directly as a field type. Its members
  must have integer values, and the width is the bit length of the largest
  value (1 to 8 bits). `enum_specifier(cls)` returns the same specifier.
- `specifier_of(annotation)` resolves any of these to a `Specifier`, which
  has `name`, `bits`, `byte_count` and `accessor`, and whose `serialize` and
  `deserialize` methods convert a value to and from little-endian bytes.
- `check_total_bits(total)` returns the byte size of a total width, or raises
  `BitfieldError` if it is not a multiple of eight.

The bit-copying primitives live in `derivekit.field_data`: `copy_bits`,
`get_field_data` and `set_field_data`, with bit 0 as the leftmost bit of the
first byte.

## Builders

`derivekit.builder.derive_builder` gives a class (made a dataclass first if it
is not one) a static `builder()` method returning a new `<Name>Builder`, a
subclass of `Builder`. The builder has one chainable setter per field, and
`build()` raises `BuildError` naming the first required field that was never
set. Fields typed `Optional[...]` or `... | None` default to `None`. A list
field declared with `each("arg")` gets an `arg` method that appends one item
at a time and defaults to an empty list; if the name equals the field's own
name, only the appending method is made.

```python
from dataclasses import dataclass
from typing import Optional
from derivekit.builder import derive_builder, each

@derive_builder
@dataclass
class Command:
    executable: str
    args: list[str] = each("arg")
    current_dir: Optional[str] = None

command = Command.builder().executable("cargo").arg("build").build()
assert command.args == ["build"]
```

## Custom debug output

`derivekit.debug.custom_debug` gives a class (made a dataclass first if it is
not one) a `__repr__` shaped like `Name { field: value, ... }`. Strings are
double-quoted and escaped, booleans shown as `true`/`false`, and enum members
by name. A field declared with `debug_field("0b{:08b}")` is shown through that
format string; `debug_repr(obj)` produces the same text directly.

## Sortedness checks

`derivekit.sorted.sorted_enum` raises `SortedError` if an enum's members are
not declared in ascending order, naming the member it should come before.

`check` is a function decorator that reads the function's source and checks
every `match` statement directly preceded by a `# sorted` comment line: cases
must be in ascending order of their patterns' dotted paths, a wildcard
`case _` may only come last, and patterns without a path are reported as
unsupported. `check_source` does the same for a string of source code and
returns how many statements it checked. A `SortedError` carries every problem
found as `Diagnostic` entries with line and column; `compare_paths` orders
dotted names segment by segment.

## What it does not do

All checks run when a class or function is decorated, at import time; nothing
is generated as source code, and there is no command-line tool.