"""typeloom exception hierarchy.

All typeloom-specific exceptions inherit from TypeloomError.

Failures the translation loop can recover from (missing JSON, truncated
JSON, schema or constraint violations) are never raised: they travel as
``Result.error`` values tagged with an ErrorCode and drive the repair
branch. Only terminal conditions are exceptions.
"""

from __future__ import annotations

import enum


class ErrorCode(str, enum.Enum):
    """Diagnostic categories produced while validating a model response."""

    NO_JSON = "no_json"
    INCOMPLETE_JSON = "incomplete_json"
    SCHEMA_VALIDATION = "schema_validation"
    CONSTRAINT_VIOLATION = "constraint_violation"


class TypeloomError(Exception):
    """Base exception for all typeloom errors."""


class OperationCancelledError(TypeloomError):
    """Raised when a caller-supplied cancel event is set mid-operation."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} was cancelled")


class TranslationError(TypeloomError):
    """Raised when the repair budget is exhausted without a valid value.

    Attributes:
        request: The request text that was being translated.
        response: The last raw response returned by the model.
        diagnosis: The last validation diagnostic.
        attempts: Number of repair attempts made before giving up.
        code: Category of the last diagnostic, if known.
    """

    def __init__(
        self,
        request: str,
        response: str,
        diagnosis: str,
        attempts: int,
        code: ErrorCode | None = None,
    ) -> None:
        self.request = request
        self.response = response
        self.diagnosis = diagnosis
        self.attempts = attempts
        self.code = code
        super().__init__(
            f"Translation failed after {attempts} repair attempt(s). "
            f"Last diagnosis: {diagnosis}"
        )


class ProgramError(TypeloomError):
    """Base exception for program parsing and evaluation errors."""


class ProgramParseError(ProgramError):
    """Raised when a JSON document does not describe a program."""


class InvalidResultReferenceError(ProgramError):
    """Raised for negative references or references to unfinished steps."""

    def __init__(self, ref: int, available: int | None = None) -> None:
        self.ref = ref
        self.available = available
        if available is None:
            message = f"{ref} is not a valid result reference"
        else:
            message = (
                f"Result reference {ref} is out of range: "
                f"only {available} step(s) have completed"
            )
        super().__init__(message)


class FunctionNotFoundError(ProgramError):
    """Raised when a function name cannot be resolved."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"Function not found: {name}")


class ArityMismatchError(FunctionNotFoundError):
    """Raised when a call's argument count differs from the declared parameters."""

    def __init__(self, name: str, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            name,
            f"Function {name} expects {expected} argument(s), got {actual}",
        )


class UnrecognizedExpressionError(ProgramError):
    """Raised when evaluation reaches an expression of unknown shape."""

    def __init__(self, source: object) -> None:
        self.source = source
        super().__init__(f"Unrecognized expression: {source!r}")


class StepInvocationError(ProgramError):
    """Raised when a bound function fails while evaluating a step.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, step_index: int, name: str, reason: str) -> None:
        self.step_index = step_index
        self.name = name
        self.reason = reason
        super().__init__(f"Step {step_index} ({name}) failed: {reason}")
