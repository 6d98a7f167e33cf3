"""A class decorator that gives a dataclass a chainable builder.

``Command.builder()`` returns a ``CommandBuilder`` with one setter method per
field.  Each setter returns the builder, so calls can be chained, and
``build()`` constructs the class once every required field has been set.
Fields annotated ``Optional[T]`` or ``T | None`` may be left unset and become
``None``.  A list field declared with :func:`each` gets a method that appends
one item at a time and defaults to an empty list.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from collections.abc import Callable, Mapping
from typing import Any

__all__ = ["BuildError", "Builder", "derive_builder", "each"]

_BUILDER_KEY = "builder"
_EACH_KEY = "each"


class BuildError(Exception):
    """Raised by :meth:`Builder.build` when a required field has not been set."""


@dataclasses.dataclass(frozen=True)
class _FieldPlan:
    name: str
    optional: bool
    each: str | None


class Builder:
    """Base class of the generated builders; holds the values set so far."""

    _target: type = object
    _plans: tuple[_FieldPlan, ...] = ()

    def __init__(self) -> None:
        self._values: dict[str, Any] = dict.fromkeys(plan.name for plan in self._plans)

    def __repr__(self) -> str:
        shown = ", ".join(f"{name}={value!r}" for name, value in self._values.items())
        return f"{type(self).__name__}({shown})"

    def build(self) -> Any:
        """Construct the target class, taking the values out of the builder.

        Raises :class:`BuildError` naming the first required field that has
        not been set.
        """
        values: dict[str, Any] = {}
        for plan in self._plans:
            value = self._values[plan.name]
            self._values[plan.name] = None
            if value is None:
                if plan.each is not None:
                    value = []
                elif not plan.optional:
                    raise BuildError(f"{plan.name} has not been set")
            values[plan.name] = value
        return self._target(**values)


def each(name: str, **kwargs: Any) -> Any:
    """Declare a list field whose builder method ``name`` appends one item.

    Other keyword arguments are passed on to :func:`dataclasses.field`.
    """
    if not isinstance(name, str) or not name.isidentifier():
        raise ValueError(f"builder method name must be an identifier, got {name!r}")
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[_BUILDER_KEY] = {_EACH_KEY: name}
    return dataclasses.field(metadata=metadata, **kwargs)


def _compact(text: str) -> str:
    return "".join(text.split())


def _is_optional(annotation: Any) -> bool:
    if isinstance(annotation, str):
        text = _compact(annotation)
        return (
            text.startswith(("Optional[", "typing.Optional["))
            or text.endswith("|None")
            or text.startswith("None|")
        )
    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    return (
        origin in (typing.Union, types.UnionType)
        and len(args) == 2
        and type(None) in args
    )


def _is_list(annotation: Any) -> bool:
    if isinstance(annotation, str):
        text = _compact(annotation)
        return text.startswith(("list[", "List[", "typing.List[")) and text.endswith("]")
    return typing.get_origin(annotation) is list and len(typing.get_args(annotation)) == 1


def _each_name(field: dataclasses.Field) -> str | None:
    spec = field.metadata.get(_BUILDER_KEY)
    if spec is None:
        return None
    if (
        isinstance(spec, Mapping)
        and set(spec) == {_EACH_KEY}
        and isinstance(spec[_EACH_KEY], str)
        and spec[_EACH_KEY].isidentifier()
    ):
        return spec[_EACH_KEY]
    raise TypeError(f'field `{field.name}`: expected `builder(each = "...")`, got {spec!r}')


def _setter(name: str) -> Callable[[Builder, Any], Builder]:
    def setter(self: Builder, value: Any) -> Builder:
        self._values[name] = value
        return self

    setter.__name__ = name
    setter.__doc__ = f"Set `{name}`."
    return setter


def _adder(field_name: str, method_name: str) -> Callable[[Builder, Any], Builder]:
    def adder(self: Builder, item: Any) -> Builder:
        current = self._values[field_name]
        self._values[field_name] = [item] if current is None else [*current, item]
        return self

    adder.__name__ = method_name
    adder.__doc__ = f"Append one item to `{field_name}`."
    return adder


def _add_method(methods: dict[str, Any], name: str, method: Any) -> None:
    if name == "build" or name.startswith("_"):
        raise TypeError(f"`{name}` cannot be used as a builder method name")
    if name in methods:
        raise TypeError(f"duplicate builder method `{name}`")
    methods[name] = method


def derive_builder(cls: type) -> type:
    """Attach a ``builder()`` static method returning a new ``<Name>Builder``.

    Classes that are not yet dataclasses are turned into dataclasses first.
    """
    if not isinstance(cls, type):
        raise TypeError(f"derive_builder expects a class, got {cls!r}")
    if not dataclasses.is_dataclass(cls):
        cls = dataclasses.dataclass(cls)

    plans: list[_FieldPlan] = []
    methods: dict[str, Any] = {}
    for field in dataclasses.fields(cls):
        if not field.init:
            continue
        annotation = field.type
        each_name = _each_name(field)
        if each_name is not None and not _is_list(annotation):
            raise TypeError(
                f"field `{field.name}`: the `builder` attribute should only be used "
                "on fields of type `list[...]`"
            )
        plans.append(_FieldPlan(field.name, _is_optional(annotation), each_name))
        if each_name != field.name:
            _add_method(methods, field.name, _setter(field.name))
        if each_name is not None:
            _add_method(methods, each_name, _adder(field.name, each_name))

    builder_name = f"{cls.__name__}Builder"
    namespace = {
        "__module__": cls.__module__,
        "__qualname__": builder_name,
        "__doc__": f"Builder for :class:`{cls.__name__}`.",
        "_target": cls,
        "_plans": tuple(plans),
        **methods,
    }
    builder_cls = type(builder_name, (Builder,), namespace)
    cls.builder = staticmethod(builder_cls)
    return cls