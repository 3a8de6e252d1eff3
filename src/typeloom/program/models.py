"""Program expression tree.

A program is a list of function calls ("steps") evaluated in order. Call
arguments are expressions: JSON literals, arrays, objects, nested calls, or
references to the result of an earlier step.

All node types are frozen dataclasses and together form the ``Expression``
union. Every node keeps the JSON it was parsed from in ``source`` for
diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from typeloom.exceptions import InvalidResultReferenceError


@dataclass(frozen=True)
class ValueExpr:
    """A JSON scalar literal (string, number, boolean or null)."""

    value: Any
    source: Any = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class ArrayExpr:
    """An ordered list of expressions."""

    items: tuple[Expression, ...]
    source: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class ObjectExpr:
    """A mapping from string keys to expressions. Key order is kept."""

    fields: tuple[tuple[str, Expression], ...]
    source: Any = field(default=None, repr=False, compare=False)

    def keys(self) -> list[str]:
        return [key for key, _ in self.fields]


@dataclass(frozen=True)
class FunctionCall:
    """A call of a named function with positional argument expressions."""

    name: str
    args: tuple[Expression, ...] = ()
    source: Any = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ResultReference:
    """A reference to the result of the step at index ``ref``."""

    ref: int
    source: Any = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.ref, bool) or not isinstance(self.ref, int) or self.ref < 0:
            raise InvalidResultReferenceError(self.ref)


@dataclass(frozen=True)
class UnknownExpr:
    """Placeholder for JSON that matches no recognized expression shape."""

    source: Any = None


Expression = Union[ValueExpr, ArrayExpr, ObjectExpr, FunctionCall, ResultReference, UnknownExpr]


@dataclass(frozen=True)
class Steps:
    """The top-level statements of a program."""

    calls: tuple[FunctionCall, ...] = ()
    source: Any = field(default=None, repr=False, compare=False)

    def __len__(self) -> int:
        return len(self.calls)

    def __iter__(self):
        return iter(self.calls)


@dataclass(frozen=True)
class Program:
    """A parsed program.

    Attributes:
        steps: The ordered function calls.
        source: The JSON document the program was parsed from, if any.
    """

    steps: Steps
    source: Any = field(default=None, repr=False, compare=False)

    @property
    def calls(self) -> tuple[FunctionCall, ...]:
        return self.steps.calls

    def __len__(self) -> int:
        return len(self.steps)
