"""Validation pipeline: type validation followed by optional constraints.

The type validator turns raw JSON text into a typed value or a diagnostic.
Diagnostics are echoed verbatim into repair prompts, so they name the
offending field and are self-contained.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import TypeAdapter, ValidationError

from typeloom.exceptions import ErrorCode
from typeloom.result import Result
from typeloom.schema import SchemaText

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class TypeValidator(Protocol[T]):
    """Parses JSON text into a value of the target type."""

    @property
    def schema(self) -> SchemaText:
        """Schema text describing the target type."""
        ...

    def validate(self, json_text: str) -> Result[T]:
        """Return a success holding the typed value, or an error with diagnostics."""
        ...


@runtime_checkable
class ConstraintsValidator(Protocol[T]):
    """Approves or rejects an already type-valid value on domain grounds."""

    def validate(self, value: T) -> Result[T]:
        ...


class PydanticValidator(Generic[T]):
    """TypeValidator backed by a pydantic TypeAdapter.

    Usage::

        validator = PydanticValidator(Shape)
        result = validator.validate('{"shape": "square"}')
        if not result.ok:
            print(result.message)  # "size: Field required"
    """

    def __init__(self, target: type[T] | Any, schema: SchemaText | None = None) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(target)
        self._schema = schema or SchemaText.from_model(target)

    @property
    def schema(self) -> SchemaText:
        return self._schema

    def validate(self, json_text: str) -> Result[T]:
        try:
            value = self._adapter.validate_json(json_text)
        except ValidationError as exc:
            return Result.error(format_validation_error(exc), ErrorCode.SCHEMA_VALIDATION)
        return Result.success(value)


class FunctionConstraintsValidator(Generic[T]):
    """Wrap a plain predicate as a ConstraintsValidator.

    The check returns None to approve or a diagnostic string to reject.
    """

    def __init__(self, check: Callable[[T], str | None]) -> None:
        self._check = check

    def validate(self, value: T) -> Result[T]:
        problem = self._check(value)
        if problem:
            return Result.error(problem, ErrorCode.CONSTRAINT_VIOLATION)
        return Result.success(value)


class ValidationPipeline(Generic[T]):
    """Type validation, an optional gating hook, then constraints validation.

    Attributes:
        type_validator: Structural/schema validator.
        constraints_validator: Optional domain-rule validator. Only ever sees
            values that passed type validation.
        on_validation_complete: Optional hook called with the type-validation
            result. Returning False returns that result immediately,
            skipping constraints validation.
    """

    def __init__(
        self,
        type_validator: TypeValidator[T],
        constraints_validator: ConstraintsValidator[T] | None = None,
        on_validation_complete: Callable[[Result[T]], bool] | None = None,
    ) -> None:
        self.type_validator = type_validator
        self.constraints_validator = constraints_validator
        self.on_validation_complete = on_validation_complete

    def validate(self, json_text: str) -> Result[T]:
        result = self.type_validator.validate(json_text)
        if result.ok is False and result.code is None:
            result = dataclasses.replace(result, code=ErrorCode.SCHEMA_VALIDATION)

        if self.on_validation_complete is not None and not self.on_validation_complete(result):
            logger.debug("Validation hook short-circuited constraints validation")
            return result

        if result.ok and self.constraints_validator is not None:
            result = self.constraints_validator.validate(result.value)
            if not result.ok and result.code is None:
                result = dataclasses.replace(result, code=ErrorCode.CONSTRAINT_VIOLATION)
        return result


def format_validation_error(exc: ValidationError) -> str:
    """Render pydantic errors as one ``path: message`` line per problem."""
    lines: list[str] = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        lines.append(f"{location}: {message}" if location else message)
    return "\n".join(lines) or str(exc)
