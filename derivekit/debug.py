"""A class decorator for a structured ``repr`` in the ``Name { field: value }`` form.

Strings are shown double-quoted and escaped, booleans as ``true``/``false``
and enum members by name.  A field declared with :func:`debug_field` is shown
through its own :meth:`str.format` format string instead.
"""

from __future__ import annotations

import dataclasses
import enum
import string
from typing import Any

__all__ = ["custom_debug", "debug_field", "debug_repr"]

_DEBUG_KEY = "debug"

_ESCAPES = {
    "\t": "\\t",
    "\r": "\\r",
    "\n": "\\n",
    "\\": "\\\\",
    '"': '\\"',
    "\0": "\\0",
}


def debug_field(fmt: str, **kwargs: Any) -> Any:
    """Declare a field shown with the format string ``fmt``, e.g. ``"0b{:08b}"``.

    Other keyword arguments are passed on to :func:`dataclasses.field`.
    """
    if not isinstance(fmt, str):
        raise TypeError(f'expected `debug = "..."`, got {fmt!r}')
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[_DEBUG_KEY] = fmt
    return dataclasses.field(metadata=metadata, **kwargs)


def _custom_format(field: dataclasses.Field) -> str | None:
    fmt = field.metadata.get(_DEBUG_KEY)
    if fmt is None:
        return None
    if not isinstance(fmt, str):
        raise TypeError(f'field `{field.name}`: expected `debug = "..."`, got {fmt!r}')
    return fmt


def _quote(text: str) -> str:
    parts = []
    for ch in text:
        if ch in _ESCAPES:
            parts.append(_ESCAPES[ch])
        elif not ch.isprintable():
            parts.append(f"\\u{{{ord(ch):x}}}")
        else:
            parts.append(ch)
    return '"' + "".join(parts) + '"'


def _debug_value(value: Any) -> str:
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, list):
        return "[" + ", ".join(_debug_value(item) for item in value) + "]"
    if type(value) is tuple:
        if len(value) == 1:
            return f"({_debug_value(value[0])},)"
        return "(" + ", ".join(_debug_value(item) for item in value) + ")"
    if isinstance(value, dict):
        shown = ", ".join(f"{_debug_value(k)}: {_debug_value(v)}" for k, v in value.items())
        return "{" + shown + "}"
    if isinstance(value, (set, frozenset)):
        return "{" + ", ".join(_debug_value(item) for item in value) + "}"
    return repr(value)


def debug_repr(obj: Any) -> str:
    """Render a dataclass instance as ``Name { field: value, ... }``."""
    if isinstance(obj, type) or not dataclasses.is_dataclass(obj):
        raise TypeError(f"debug_repr expects a dataclass instance, got {obj!r}")
    parts = []
    for field in dataclasses.fields(obj):
        value = getattr(obj, field.name)
        fmt = _custom_format(field)
        shown = fmt.format(value) if fmt is not None else _debug_value(value)
        parts.append(f"{field.name}: {shown}")
    name = type(obj).__name__
    if not parts:
        return name
    return f"{name} {{ {', '.join(parts)} }}"


def custom_debug(cls: type) -> type:
    """Give ``cls`` a ``__repr__`` built by :func:`debug_repr`.

    Classes that are not yet dataclasses are turned into dataclasses first.
    Field format strings are checked here, when the class is decorated.
    """
    if not isinstance(cls, type):
        raise TypeError(f"custom_debug expects a class, got {cls!r}")
    if not dataclasses.is_dataclass(cls):
        cls = dataclasses.dataclass(cls, repr=False)
    for field in dataclasses.fields(cls):
        fmt = _custom_format(field)
        if fmt is None:
            continue
        try:
            list(string.Formatter().parse(fmt))
        except ValueError as error:
            raise ValueError(
                f"field `{field.name}`: invalid debug format {fmt!r}: {error}"
            ) from error
    cls.__repr__ = debug_repr
    return cls