"""Tests for program evaluation: ordering, references, failures, cancellation."""

from __future__ import annotations

import asyncio

import pytest

from typeloom.exceptions import (
    ArityMismatchError,
    FunctionNotFoundError,
    InvalidResultReferenceError,
    OperationCancelledError,
    StepInvocationError,
    UnrecognizedExpressionError,
)
from typeloom.program.api import Api
from typeloom.program.evaluator import EvaluationResult, Evaluator, evaluate
from typeloom.program.models import (
    FunctionCall,
    Program,
    ResultReference,
    Steps,
    UnknownExpr,
    ValueExpr,
)
from typeloom.program.parser import parse_program


def program_of(*calls: FunctionCall) -> Program:
    return Program(Steps(tuple(calls)))


class RecordingApi:
    """Builds an Api whose functions log their invocations."""

    def __init__(self):
        self.log: list[tuple[str, tuple]] = []
        self.api = Api("Recording")
        self.api.register(self._make("f", lambda x: x * 10), name="f")
        self.api.register(self._make("g", lambda x: x + 1), name="g")

    def _make(self, name, body):
        def handler(x):
            self.log.append((name, (x,)))
            return body(x)

        return handler


class TestEvaluationOrder:
    @pytest.mark.asyncio
    async def test_reference_substitutes_prior_result(self):
        recorder = RecordingApi()
        program = program_of(
            FunctionCall("f", (ValueExpr(1),)),
            FunctionCall("g", (ResultReference(0),)),
        )

        results = await evaluate(program, recorder.api)

        assert results == [10, 11]
        assert recorder.log == [("f", (1,)), ("g", (10,))]

    @pytest.mark.asyncio
    async def test_run_returns_evaluation_result(self, math_api):
        program = parse_program(
            {
                "@steps": [
                    {"@func": "add", "@args": [1, 2]},
                    {"@func": "mul", "@args": [{"@ref": 0}, 4]},
                    {"@func": "neg", "@args": [{"@ref": 1}]},
                ]
            }
        )
        outcome = await Evaluator(math_api).run(program)
        assert isinstance(outcome, EvaluationResult)
        assert outcome.results == (3, 12, -12)
        assert outcome.value == -12

    @pytest.mark.asyncio
    async def test_empty_program(self, math_api):
        outcome = await Evaluator(math_api).run(parse_program({"@steps": []}))
        assert outcome.results == ()
        assert outcome.value is None

    @pytest.mark.asyncio
    async def test_arrays_and_objects_are_evaluated(self, math_api):
        program = parse_program(
            {
                "@steps": [
                    {"@func": "add", "@args": [1, 1]},
                    {
                        "@func": "pack",
                        "@args": [
                            [{"@ref": 0}, 5, [{"@ref": 0}]],
                            {"total": {"@ref": 0}, "label": "x"},
                        ],
                    },
                ]
            }
        )
        results = await evaluate(program, math_api)
        assert results[1] == {
            "items": [2, 5, [2]],
            "options": {"total": 2, "label": "x"},
        }
        assert list(results[1]["options"]) == ["total", "label"]

    @pytest.mark.asyncio
    async def test_nested_call_is_evaluated_inline(self, math_api):
        program = parse_program(
            {"@steps": [{"@func": "mul", "@args": [{"@func": "add", "@args": [2, 3]}, 2]}]}
        )
        assert await evaluate(program, math_api) == [10]

    @pytest.mark.asyncio
    async def test_plain_resolver_callable(self, math_api):
        program = program_of(FunctionCall("add", (ValueExpr(1), ValueExpr(2))))
        assert await evaluate(program, math_api.resolve) == [3]


class TestEvaluationFailures:
    @pytest.mark.asyncio
    async def test_reference_to_unfinished_step(self, math_api):
        program = program_of(FunctionCall("neg", (ResultReference(0),)))
        with pytest.raises(InvalidResultReferenceError) as exc_info:
            await evaluate(program, math_api)
        assert exc_info.value.ref == 0
        assert exc_info.value.available == 0

    @pytest.mark.asyncio
    async def test_forward_reference(self, math_api):
        program = program_of(
            FunctionCall("neg", (ValueExpr(1),)),
            FunctionCall("neg", (ResultReference(2),)),
            FunctionCall("neg", (ValueExpr(3),)),
        )
        with pytest.raises(InvalidResultReferenceError):
            await evaluate(program, math_api)

    @pytest.mark.asyncio
    async def test_unknown_expression_always_fails(self, math_api):
        program = program_of(FunctionCall("neg", (UnknownExpr({"@func": 1}),)))
        with pytest.raises(UnrecognizedExpressionError):
            await evaluate(program, math_api)

    @pytest.mark.asyncio
    async def test_function_not_found(self, math_api):
        program = program_of(FunctionCall("divide", (ValueExpr(1), ValueExpr(2))))
        with pytest.raises(FunctionNotFoundError, match="divide"):
            await evaluate(program, math_api)

    @pytest.mark.asyncio
    async def test_arity_mismatch(self, math_api):
        program = program_of(FunctionCall("add", (ValueExpr(1),)))
        with pytest.raises(ArityMismatchError):
            await evaluate(program, math_api)

    @pytest.mark.asyncio
    async def test_step_failure_aborts_remaining_steps(self):
        calls: list[str] = []
        api = Api()

        def boom() -> None:
            calls.append("boom")
            raise RuntimeError("kaboom")

        def after() -> str:
            calls.append("after")
            return "ran"

        api.register(boom)
        api.register(after)
        program = program_of(FunctionCall("boom"), FunctionCall("after"))

        with pytest.raises(StepInvocationError) as exc_info:
            await evaluate(program, api)

        error = exc_info.value
        assert error.step_index == 0
        assert error.name == "boom"
        assert isinstance(error.__cause__, RuntimeError)
        assert "kaboom" in str(error)
        assert calls == ["boom"]

    @pytest.mark.asyncio
    async def test_async_step_failure(self):
        api = Api()

        async def explode(x):
            raise ValueError(f"bad {x}")

        api.register(explode)
        with pytest.raises(StepInvocationError, match="bad 1"):
            await evaluate(program_of(FunctionCall("explode", (ValueExpr(1),))), api)


class TestEvaluationCancellation:
    @pytest.mark.asyncio
    async def test_cancel_event_stops_before_next_step(self):
        event = asyncio.Event()
        calls: list[int] = []
        api = Api()

        def step(n):
            calls.append(n)
            event.set()
            return n

        api.register(step)
        program = program_of(
            FunctionCall("step", (ValueExpr(1),)),
            FunctionCall("step", (ValueExpr(2),)),
        )
        with pytest.raises(OperationCancelledError):
            await evaluate(program, api, cancel_event=event)
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_cancel_event_set_by_last_step(self):
        event = asyncio.Event()
        api = Api()

        def finish():
            event.set()
            return "done"

        api.register(finish)
        with pytest.raises(OperationCancelledError):
            await evaluate(program_of(FunctionCall("finish")), api, cancel_event=event)

    @pytest.mark.asyncio
    async def test_cancel_event_interrupts_running_step(self):
        event = asyncio.Event()
        interrupted = asyncio.Event()
        api = Api()

        async def wait_forever():
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                interrupted.set()
                raise

        api.register(wait_forever)

        async def cancel_soon():
            await asyncio.sleep(0.01)
            event.set()

        canceller = asyncio.create_task(cancel_soon())
        with pytest.raises(OperationCancelledError):
            await asyncio.wait_for(
                evaluate(program_of(FunctionCall("wait_forever")), api, cancel_event=event),
                timeout=1,
            )
        await canceller
        assert interrupted.is_set()

    @pytest.mark.asyncio
    async def test_step_error_with_event_is_wrapped(self):
        api = Api()

        def broken():
            raise KeyError("missing")

        api.register(broken)
        with pytest.raises(StepInvocationError) as exc_info:
            await evaluate(program_of(FunctionCall("broken")), api, cancel_event=asyncio.Event())
        assert isinstance(exc_info.value.__cause__, KeyError)

    @pytest.mark.asyncio
    async def test_task_cancellation_is_not_wrapped(self):
        started = asyncio.Event()
        api = Api()

        async def slow():
            started.set()
            await asyncio.sleep(10)

        api.register(slow)
        task = asyncio.create_task(evaluate(program_of(FunctionCall("slow")), api))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
