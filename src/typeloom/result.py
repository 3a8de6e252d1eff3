"""Result type shared by validators and the translation loop.

A Result is either a success carrying a value or an error carrying a
message, never both. Validators return Results instead of raising so that
expected failures can be fed back to the model as repair instructions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from typeloom.exceptions import ErrorCode

T = TypeVar("T")

_MISSING = object()


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a validation step.

    Attributes:
        ok: True for a success.
        message: Diagnostic text for an error, empty for a success.
        code: Category of the error, or None.
    """

    ok: bool
    _value: object = _MISSING
    message: str = ""
    code: ErrorCode | None = None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(ok=True, _value=value)

    @classmethod
    def error(cls, message: str, code: ErrorCode | None = None) -> Result[T]:
        return cls(ok=False, message=message, code=code)

    @property
    def value(self) -> T:
        """The validated value.

        Raises:
            ValueError: If this is an error result.
        """
        if not self.ok:
            raise ValueError(f"Result is an error: {self.message}")
        return self._value  # type: ignore[return-value]

    def __repr__(self) -> str:
        if self.ok:
            return f"Result.success({self._value!r})"
        return f"Result.error({self.message!r})"

    def __str__(self) -> str:
        return "success" if self.ok else self.message
