"""Program evaluation.

Steps run strictly in order. Each step's arguments are evaluated
depth-first, left to right, then the step's function is resolved, bound
and awaited. The step's return value is stored at the step's index where
later ``@ref`` expressions can read it.

The first failing step aborts the program; no later step runs.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from typeloom.cancellation import await_or_cancel
from typeloom.exceptions import (
    FunctionNotFoundError,
    InvalidResultReferenceError,
    OperationCancelledError,
    StepInvocationError,
    UnrecognizedExpressionError,
)
from typeloom.program.api import Api, FunctionDefinition
from typeloom.program.models import (
    ArrayExpr,
    Expression,
    FunctionCall,
    ObjectExpr,
    Program,
    ResultReference,
    UnknownExpr,
    ValueExpr,
)

logger = logging.getLogger(__name__)

Resolver = Callable[[str], "FunctionDefinition | None"]


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of a successful program run.

    Attributes:
        results: One result per step, in step order.
    """

    results: tuple[Any, ...]

    @property
    def value(self) -> Any:
        """The last step's result, or None for an empty program."""
        return self.results[-1] if self.results else None


class Evaluator:
    """Evaluates programs against a function resolver.

    The evaluator itself is stateless; step results live in a list owned by
    a single run() call, so one Evaluator may run programs concurrently.

    Usage::

        evaluator = Evaluator(api)
        outcome = await evaluator.run(program)
        print(outcome.value)
    """

    def __init__(self, resolve: Api | Resolver) -> None:
        if isinstance(resolve, Api):
            resolve = resolve.resolve
        self._resolve = resolve

    async def run(
        self,
        program: Program,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> EvaluationResult:
        """Evaluate every step of ``program``.

        Raises:
            InvalidResultReferenceError: A reference names a step that has
                not completed.
            FunctionNotFoundError: A name is not registered, or the argument
                count does not match (ArityMismatchError).
            UnrecognizedExpressionError: An UnknownExpr was reached.
            StepInvocationError: A function raised; chained from its error.
            OperationCancelledError: ``cancel_event`` was set before or while
                a step ran. The running step is cancelled.
        """
        results: list[Any] = []
        for index, call in enumerate(program.calls):
            logger.debug("Evaluating step %d: %s", index, call.name)
            value = await self._evaluate_call(call, index, results, cancel_event)
            results.append(value)
        return EvaluationResult(results=tuple(results))

    async def _evaluate_call(
        self,
        call: FunctionCall,
        step_index: int,
        results: list[Any],
        cancel_event: asyncio.Event | None,
    ) -> Any:
        args = [
            await self._evaluate(arg, step_index, results, cancel_event)
            for arg in call.args
        ]

        definition = self._resolve(call.name)
        if definition is None:
            raise FunctionNotFoundError(call.name)
        definition.bind(args)

        try:
            return await await_or_cancel(definition.invoke(args), cancel_event, "evaluate")
        except OperationCancelledError:
            raise
        except Exception as exc:
            raise StepInvocationError(step_index, call.name, f"{type(exc).__name__}: {exc}") from exc

    async def _evaluate(
        self,
        expr: Expression,
        step_index: int,
        results: list[Any],
        cancel_event: asyncio.Event | None,
    ) -> Any:
        if isinstance(expr, ValueExpr):
            return expr.value
        if isinstance(expr, ResultReference):
            if expr.ref >= len(results):
                raise InvalidResultReferenceError(expr.ref, available=len(results))
            return results[expr.ref]
        if isinstance(expr, ArrayExpr):
            return [
                await self._evaluate(item, step_index, results, cancel_event)
                for item in expr.items
            ]
        if isinstance(expr, ObjectExpr):
            return {
                key: await self._evaluate(value, step_index, results, cancel_event)
                for key, value in expr.fields
            }
        if isinstance(expr, FunctionCall):
            return await self._evaluate_call(expr, step_index, results, cancel_event)
        if isinstance(expr, UnknownExpr):
            raise UnrecognizedExpressionError(expr.source)
        raise TypeError(f"Not an expression: {type(expr).__name__}")


async def evaluate(
    program: Program,
    resolve: Api | Resolver,
    *,
    cancel_event: asyncio.Event | None = None,
) -> list[Any]:
    """Evaluate ``program`` and return the list of step results."""
    outcome = await Evaluator(resolve).run(program, cancel_event=cancel_event)
    return list(outcome.results)
