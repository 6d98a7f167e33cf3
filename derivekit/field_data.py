"""Bit-level copying between byte buffers.

Bits are numbered from the most significant bit of the first byte: bit 0 is
the leftmost bit of byte 0, bit 8 the leftmost bit of byte 1, and so on.
"""

from __future__ import annotations

from collections.abc import Sequence

__all__ = ["copy_bits", "get_field_data", "set_field_data"]


def _check_range(name: str, data: Sequence[int], start: int, bit_count: int) -> None:
    if start < 0:
        raise ValueError(f"{name} bit start must not be negative, got {start}")
    if start + bit_count > len(data) * 8:
        raise IndexError(
            f"{name} range of {bit_count} bits from bit {start} exceeds "
            f"{len(data)} byte(s)"
        )


def copy_bits(
    source: Sequence[int],
    destination: bytearray,
    source_bit_start: int,
    destination_bit_start: int,
    bit_count: int,
) -> None:
    """Copy ``bit_count`` bits from ``source`` into ``destination`` in place.

    Bits of ``destination`` outside the target range are left unchanged.
    """
    if bit_count < 0:
        raise ValueError(f"bit count must not be negative, got {bit_count}")
    if bit_count == 0:
        return
    _check_range("source", source, source_bit_start, bit_count)
    _check_range("destination", destination, destination_bit_start, bit_count)

    source_bits = range(source_bit_start, source_bit_start + bit_count)
    destination_bits = range(destination_bit_start, destination_bit_start + bit_count)
    for src, dst in zip(source_bits, destination_bits):
        destination_mask = 0x80 >> (dst % 8)
        if source[src // 8] & (0x80 >> (src % 8)):
            destination[dst // 8] |= destination_mask
        else:
            destination[dst // 8] &= ~destination_mask & 0xFF


def _field_bit_start(byte_count: int, bit_count: int) -> int:
    """Where a field's bits begin inside its little-endian value buffer."""
    if bit_count < 0:
        raise ValueError(f"bit count must not be negative, got {bit_count}")
    if bit_count > byte_count * 8:
        raise ValueError(
            f"{bit_count} bits do not fit into {byte_count} byte(s) of field data"
        )
    # Unused bytes go at the end; the field's last bit lines up with the
    # last bit of the last byte it occupies.
    return (byte_count * 8 - bit_count) % 8


def get_field_data(
    bitfield_data: Sequence[int], bit_start_index: int, bit_count: int, byte_count: int
) -> bytes:
    """Extract a field from ``bitfield_data`` into a ``byte_count``-byte buffer."""
    field_start = _field_bit_start(byte_count, bit_count)
    field_data = bytearray(byte_count)
    copy_bits(bitfield_data, field_data, bit_start_index, field_start, bit_count)
    return bytes(field_data)


def set_field_data(
    bitfield_data: bytearray,
    field_data: Sequence[int],
    bit_start_index: int,
    bit_count: int,
) -> None:
    """Write the field held in ``field_data`` into ``bitfield_data`` in place."""
    field_start = _field_bit_start(len(field_data), bit_count)
    copy_bits(field_data, bitfield_data, field_start, bit_start_index, bit_count)