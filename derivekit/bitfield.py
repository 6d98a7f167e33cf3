"""A class decorator that packs annotated fields into a byte buffer.

Fields are laid out in declaration order starting from the most significant
bit of the first byte.  Each field's value is stored as the bits of its
little-endian accessor bytes: whole bytes first, then the low bits of the
final, partial byte.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .field_data import copy_bits
from .specifiers import BitfieldError, Specifier, check_total_bits, specifier_of

__all__ = ["bitfield"]


@dataclass(frozen=True)
class _FieldLayout:
    name: str
    specifier: Specifier
    start: int

    def read(self, data: bytearray) -> Any:
        spec = self.specifier
        full, rem = divmod(spec.bits, 8)
        buffer = bytearray(spec.byte_count)
        copy_bits(data, buffer, self.start, 0, full * 8)
        copy_bits(data, buffer, self.start + full * 8, full * 8 + 8 - rem, rem)
        return spec.deserialize(bytes(buffer))

    def write(self, data: bytearray, value: Any) -> None:
        spec = self.specifier
        full, rem = divmod(spec.bits, 8)
        buffer = spec.serialize(value)
        copy_bits(buffer, data, 0, self.start, full * 8)
        copy_bits(buffer, data, full * 8 + 8 - rem, self.start + full * 8, rem)


def _field_property(layout: _FieldLayout) -> property:
    def getter(self: Any) -> Any:
        return layout.read(self._data)

    def setter(self: Any, value: Any) -> None:
        layout.write(self._data, value)

    return property(getter, setter, doc=f"{layout.specifier.name} field at bit {layout.start}.")


def _own_annotations(cls: type) -> dict[str, Any]:
    annotations = cls.__dict__.get("__annotations__")
    if annotations is None:
        annotations = getattr(cls, "__annotations__", None) or {}
        if any(
            annotations is getattr(base, "__annotations__", None) for base in cls.__mro__[1:]
        ):
            annotations = {}
    return dict(annotations)


def _layout_fields(cls: type) -> tuple[tuple[_FieldLayout, ...], int]:
    layouts = []
    start = 0
    for name, annotation in _own_annotations(cls).items():
        if isinstance(annotation, str):
            raise BitfieldError(
                f"field `{name}` has the unevaluated annotation {annotation!r}; "
                "bitfield classes need evaluated annotations"
            )
        try:
            spec = specifier_of(annotation)
        except BitfieldError as error:
            raise BitfieldError(f"field `{name}`: {error}") from error
        layouts.append(_FieldLayout(name, spec, start))
        start += spec.bits
    return tuple(layouts), start


def bitfield(cls: type) -> type:
    """Turn the annotated fields of ``cls`` into packed bit properties.

    The total width must be a multiple of 8 bits.  Instances start zeroed and
    expose their storage through ``bytes(instance)``.
    """
    if not isinstance(cls, type):
        raise TypeError(f"bitfield expects a class, got {cls!r}")

    layouts, total_bits = _layout_fields(cls)
    byte_size = check_total_bits(total_bits)
    by_name = {layout.name: layout for layout in layouts}

    def __init__(self: Any, data: bytes | None = None, **values: Any) -> None:
        if data is None:
            self._data = bytearray(byte_size)
        else:
            if len(data) != byte_size:
                raise BitfieldError(
                    f"{cls.__name__} takes {byte_size} byte(s), got {len(data)}"
                )
            self._data = bytearray(data)
        for name, value in values.items():
            if name not in by_name:
                raise TypeError(f"{cls.__name__} has no field named {name!r}")
            by_name[name].write(self._data, value)

    def from_bytes(klass: type, data: bytes) -> Any:
        return klass(data)

    def __bytes__(self: Any) -> bytes:
        return bytes(self._data)

    def __eq__(self: Any, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._data == other._data

    def __repr__(self: Any) -> str:
        shown = ", ".join(f"{layout.name}={layout.read(self._data)!r}" for layout in layouts)
        return f"{type(self).__name__}({shown})"

    cls.__init__ = __init__
    cls.from_bytes = classmethod(from_bytes)
    cls.__bytes__ = __bytes__
    cls.__eq__ = __eq__
    cls.__hash__ = None
    cls.__repr__ = __repr__
    cls.byte_size = byte_size
    cls.__bitfield_fields__ = layouts
    for layout in layouts:
        setattr(cls, layout.name, _field_property(layout))
    return cls