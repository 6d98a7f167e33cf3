"""Checks that enum members and ``match`` cases are written in sorted order.

:func:`sorted_enum` is a class decorator for :class:`enum.Enum` subclasses.
It requires member names to appear in ascending order.

:func:`check` is a function decorator. It inspects the function's source.
Every ``match`` statement directly preceded by a ``# sorted`` comment line
must have its cases in ascending order of their patterns' dotted paths.
A wildcard ``case _`` may appear only last. Patterns without a path, such
as sequences, mappings or literals, are reported as unsupported.
:func:`check_source` applies the same check to a source string.
"""

from __future__ import annotations

import ast
import enum
import inspect
import re
import textwrap
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Any, TypeVar

__all__ = [
    "Diagnostic",
    "SortedError",
    "check",
    "check_source",
    "compare_paths",
    "sorted_enum",
]

_MARKER = re.compile(r"^\s*#\s*sorted\s*$")

_F = TypeVar("_F", bound=Callable[..., Any])


@dataclass(frozen=True)
class Diagnostic:
    """One ordering problem, with its location in the source when known."""

    message: str
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        if self.column is None:
            return f"line {self.line}: {self.message}"
        return f"line {self.line}, column {self.column}: {self.message}"


class SortedError(Exception):
    """Raised when members or match cases are out of order or unsupported."""

    def __init__(self, diagnostics: Iterable[Diagnostic]) -> None:
        self.diagnostics = tuple(diagnostics)
        super().__init__("\n".join(str(d) for d in self.diagnostics))

    @property
    def messages(self) -> tuple[str, ...]:
        """The messages of all diagnostics, without locations."""
        return tuple(d.message for d in self.diagnostics)


def _segments(path: str | Sequence[str]) -> tuple[str, ...]:
    if isinstance(path, str):
        return tuple(path.split("."))
    return tuple(path)


def compare_paths(a: str | Sequence[str], b: str | Sequence[str]) -> int:
    """Compare two dotted paths segment by segment.

    Returns a negative number, zero or a positive number when ``a`` sorts
    before, equal to or after ``b``.  A path that is a strict prefix of the
    other sorts first.
    """
    for left, right in zip(_segments(a), _segments(b)):
        if left < right:
            return -1
        if left > right:
            return 1
    return (len(_segments(a)) > len(_segments(b))) - (len(_segments(a)) < len(_segments(b)))


def _path_text(path: Sequence[str]) -> str:
    return ".".join(path)


def sorted_enum(cls: Any) -> Any:
    """Require the members of an enum class to be declared in sorted order."""
    if not (isinstance(cls, type) and issubclass(cls, enum.Enum)):
        raise SortedError([Diagnostic("expected enum or match expression")])
    names = list(cls.__members__)
    for previous, name in zip(names, names[1:]):
        if name < previous:
            later = next(other for other in names if other > name)
            raise SortedError([Diagnostic(f"{name} should sort before {later}")])
    return cls


def _expr_path(node: ast.expr) -> tuple[str, ...] | None:
    if isinstance(node, ast.Name):
        return (node.id,)
    if isinstance(node, ast.Attribute):
        base = _expr_path(node.value)
        return None if base is None else (*base, node.attr)
    return None


def _case_path(pattern: ast.pattern) -> tuple[str, ...] | None:
    if isinstance(pattern, ast.MatchAs):
        if pattern.pattern is None and pattern.name is not None:
            return (pattern.name,)
        return None
    if isinstance(pattern, ast.MatchValue):
        return _expr_path(pattern.value)
    if isinstance(pattern, ast.MatchClass):
        return _expr_path(pattern.cls)
    return None


def _is_wildcard(pattern: ast.pattern) -> bool:
    return isinstance(pattern, ast.MatchAs) and pattern.pattern is None and pattern.name is None


def _at(node: ast.AST, message: str) -> Diagnostic:
    return Diagnostic(message, node.lineno, node.col_offset + 1)


def _check_match(node: ast.Match) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    paths = [_case_path(case.pattern) for case in node.cases]
    previous: tuple[str, ...] | None = None
    wildcard: ast.pattern | None = None

    for case, path in zip(node.cases, paths):
        if wildcard is not None:
            diagnostics.append(_at(wildcard, "wildcard pattern should be last"))
        if path is not None:
            if previous is not None and compare_paths(path, previous) < 0:
                later = next(
                    other for other in paths
                    if other is not None and compare_paths(other, path) > 0
                )
                diagnostics.append(
                    _at(
                        case.pattern,
                        f"{_path_text(path)} should sort before {_path_text(later)}",
                    )
                )
            previous = path
        elif _is_wildcard(case.pattern):
            wildcard = case.pattern
        else:
            diagnostics.append(_at(case.pattern, "unsupported by sorted"))
    return diagnostics


def _is_marked(node: ast.Match, lines: Sequence[str]) -> bool:
    index = node.lineno - 2
    return 0 <= index < len(lines) and _MARKER.match(lines[index]) is not None


def check_source(source: str) -> int:
    """Check every ``# sorted`` match statement in ``source``.

    Returns how many match statements were checked.  Raises
    :class:`SortedError` carrying every problem found.
    """
    tree = ast.parse(source)
    lines = source.splitlines()
    marked = sorted(
        (node for node in ast.walk(tree) if isinstance(node, ast.Match) and _is_marked(node, lines)),
        key=lambda node: (node.lineno, node.col_offset),
    )
    diagnostics = [diagnostic for node in marked for diagnostic in _check_match(node)]
    if diagnostics:
        raise SortedError(diagnostics)
    return len(marked)


def check(func: _F) -> _F:
    """Check the ``# sorted`` match statements of ``func`` and return it unchanged."""
    if not callable(func):
        raise TypeError(f"check expects a function, got {func!r}")
    lines, first_line = inspect.getsourcelines(func)
    source = textwrap.dedent("".join(lines))
    try:
        check_source(source)
    except SortedError as error:
        offset = max(first_line, 1) - 1
        raise SortedError(
            replace(d, line=d.line + offset) if d.line is not None else d
            for d in error.diagnostics
        ) from None
    return func