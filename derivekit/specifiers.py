"""Bitfield specifiers: how many bits a field takes and how its value is encoded.

A specifier pairs a bit width with an accessor type.  Integer specifiers
``B1`` to ``B64`` are produced by :func:`bit_width_type` and use the narrowest
of 1, 2, 4 or 8 bytes that holds their width.  ``bool`` takes one bit, and an
enum whose members have small non-negative integer values takes as many bits
as its largest value needs.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

__all__ = [
    "BOOL",
    "BitfieldError",
    "Specifier",
    "bit_width_type",
    "check_total_bits",
    "enum_specifier",
    "specifier_of",
]

_MAX_BITS = 64
_MAX_DISCRIMINANT = 0xFFFF_FFFF


class BitfieldError(ValueError):
    """Raised for an invalid bitfield definition or a value that does not fit."""


@dataclass(frozen=True)
class Specifier:
    """A field type: its width in bits and its accessor encoding.

    ``byte_count`` is the size of the accessor value when serialized as
    little-endian bytes.
    """

    name: str
    bits: int
    byte_count: int
    accessor: type
    encode: Callable[[Any], int] = field(repr=False, compare=False)
    decode: Callable[[int], Any] = field(repr=False, compare=False)

    def serialize(self, value: Any) -> bytes:
        """Encode ``value`` as ``byte_count`` little-endian bytes."""
        raw = self.encode(value)
        if not 0 <= raw < 1 << (8 * self.byte_count):
            raise BitfieldError(
                f"value {value!r} does not fit into the {self.byte_count}-byte "
                f"accessor of {self.name}"
            )
        return raw.to_bytes(self.byte_count, "little")

    def deserialize(self, data: bytes) -> Any:
        """Decode ``byte_count`` little-endian bytes into an accessor value."""
        if len(data) != self.byte_count:
            raise BitfieldError(
                f"{self.name} expects {self.byte_count} byte(s), got {len(data)}"
            )
        return self.decode(int.from_bytes(data, "little"))


def _encode_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {type(value).__name__}")
    return value


def _encode_bool(value: Any) -> int:
    if not isinstance(value, bool):
        raise TypeError(f"expected a bool, got {type(value).__name__}")
    return int(value)


def _decode_bool(raw: int) -> bool:
    return raw != 0


BOOL = Specifier("bool", 1, 1, bool, _encode_bool, _decode_bool)


@lru_cache(maxsize=None)
def bit_width_type(bits: int) -> Specifier:
    """Return the unsigned integer specifier ``B<bits>`` for 1 to 64 bits."""
    if isinstance(bits, bool) or not isinstance(bits, int):
        raise TypeError(f"bit width must be an integer, got {type(bits).__name__}")
    if not 1 <= bits <= _MAX_BITS:
        raise BitfieldError(f"bit width must be between 1 and {_MAX_BITS}, got {bits}")
    next_power_of_two = 1 << (bits - 1).bit_length()
    accessor_bits = max(next_power_of_two, 8)
    return Specifier(f"B{bits}", bits, accessor_bits // 8, int, _encode_int, int)


@lru_cache(maxsize=None)
def enum_specifier(enum_cls: type[enum.Enum]) -> Specifier:
    """Build the specifier for an enum whose members carry integer values.

    The width is the bit length of the largest value, which must be between
    1 and 8 bits so that the value fits in one accessor byte.
    """
    if not (isinstance(enum_cls, type) and issubclass(enum_cls, enum.Enum)):
        raise BitfieldError(f"{enum_cls!r} is not an enum class")
    name = enum_cls.__name__
    members = list(enum_cls)
    if not members:
        raise BitfieldError(f"enum `{name}` has no variants")
    for member in members:
        value = member.value
        if (
            isinstance(value, bool)
            or not isinstance(value, int)
            or not 0 <= value <= _MAX_DISCRIMINANT
        ):
            raise BitfieldError(
                "every variant in a bitfield enum must have an explicit integer "
                f"discriminant; `{name}.{member.name}` has {value!r}"
            )

    by_value = {member.value: member for member in members}
    bits = max(by_value).bit_length()
    if not 1 <= bits <= 8:
        raise BitfieldError(
            f"discriminants of `{name}` need {bits} bits; "
            "bitfield enums must take between 1 and 8 bits"
        )

    def encode(value: Any) -> int:
        if not isinstance(value, enum_cls):
            raise TypeError(f"expected a member of `{name}`, got {value!r}")
        return value.value

    def decode(raw: int) -> enum.Enum:
        try:
            return by_value[raw]
        except KeyError:
            raise BitfieldError(f"unexpected value for `{name}`: {raw}") from None

    return Specifier(name, bits, (bits + 7) // 8, enum_cls, encode, decode)


def specifier_of(spec: Any) -> Specifier:
    """Resolve a field annotation to its specifier."""
    if isinstance(spec, Specifier):
        return spec
    if spec is bool:
        return BOOL
    if isinstance(spec, type) and issubclass(spec, enum.Enum):
        return enum_specifier(spec)
    raise BitfieldError(f"{spec!r} is not a bitfield specifier")


def check_total_bits(total_bits: int) -> int:
    """Return the byte size for ``total_bits``, which must be a multiple of 8."""
    if total_bits < 0:
        raise BitfieldError(f"total size must not be negative, got {total_bits}")
    remainder = total_bits % 8
    if remainder:
        raise BitfieldError(
            f"total size of {total_bits} bits is not a multiple of 8 bits "
            f"({remainder} mod 8)"
        )
    return total_bits // 8