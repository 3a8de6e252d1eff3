"""Build Program trees from JSON documents.

Program JSON uses ``@``-prefixed keys::

    {"@steps": [
        {"@func": "getWeather", "@args": ["Seattle"]},
        {"@func": "summarize", "@args": [{"@ref": 0}]}
    ]}

Objects carrying ``@func`` or ``@ref`` are calls and references; any other
object is a plain object expression. A ``@func``/``@ref`` object of the
wrong shape becomes an UnknownExpr, which fails when evaluated.
"""

from __future__ import annotations

import json
from typing import Any

from typeloom.exceptions import InvalidResultReferenceError, ProgramParseError
from typeloom.program.models import (
    ArrayExpr,
    Expression,
    FunctionCall,
    ObjectExpr,
    Program,
    ResultReference,
    Steps,
    UnknownExpr,
    ValueExpr,
)

STEPS_KEY = "@steps"
FUNC_KEY = "@func"
ARGS_KEY = "@args"
REF_KEY = "@ref"


def parse_program(document: str | dict) -> Program:
    """Parse a program from JSON text or an already-decoded dict.

    Raises:
        ProgramParseError: If the document is not valid JSON, has no
            ``@steps`` array, or a step is not a function call.
        InvalidResultReferenceError: If a reference index is negative.
    """
    if isinstance(document, str):
        try:
            document = json.loads(document)
        except json.JSONDecodeError as exc:
            raise ProgramParseError(f"Program is not valid JSON: {exc}") from exc

    if not isinstance(document, dict):
        raise ProgramParseError("Program must be a JSON object")
    raw_steps = document.get(STEPS_KEY)
    if not isinstance(raw_steps, list):
        raise ProgramParseError(f"Program must have a '{STEPS_KEY}' array")

    calls: list[FunctionCall] = []
    for index, raw_step in enumerate(raw_steps):
        step = parse_expression(raw_step)
        if not isinstance(step, FunctionCall):
            raise ProgramParseError(
                f"Step {index} is not a function call: {json.dumps(raw_step)}"
            )
        calls.append(step)

    return Program(steps=Steps(calls=tuple(calls), source=raw_steps), source=document)


def parse_expression(node: Any) -> Expression:
    """Convert one decoded JSON node into an expression, bottom-up."""
    if isinstance(node, list):
        return ArrayExpr(items=tuple(parse_expression(item) for item in node), source=node)
    if isinstance(node, dict):
        if FUNC_KEY in node:
            return _parse_call(node)
        if REF_KEY in node:
            return _parse_ref(node)
        return ObjectExpr(
            fields=tuple((str(key), parse_expression(value)) for key, value in node.items()),
            source=node,
        )
    if node is None or isinstance(node, (str, int, float, bool)):
        return ValueExpr(value=node, source=node)
    return UnknownExpr(source=node)


def _parse_call(node: dict) -> Expression:
    name = node.get(FUNC_KEY)
    args = node.get(ARGS_KEY, [])
    extra_keys = set(node) - {FUNC_KEY, ARGS_KEY}
    if not isinstance(name, str) or not name or not isinstance(args, list) or extra_keys:
        return UnknownExpr(source=node)
    return FunctionCall(
        name=name,
        args=tuple(parse_expression(arg) for arg in args),
        source=node,
    )


def _parse_ref(node: dict) -> Expression:
    ref = node.get(REF_KEY)
    if len(node) != 1 or isinstance(ref, bool) or not isinstance(ref, int):
        return UnknownExpr(source=node)
    if ref < 0:
        raise InvalidResultReferenceError(ref)
    return ResultReference(ref=ref, source=node)


def program_to_json(program: Program) -> dict:
    """Serialize a program back into its JSON document form."""
    return {STEPS_KEY: [expression_to_json(call) for call in program.calls]}


def expression_to_json(expr: Expression) -> Any:
    if isinstance(expr, FunctionCall):
        node: dict[str, Any] = {FUNC_KEY: expr.name}
        if expr.args:
            node[ARGS_KEY] = [expression_to_json(arg) for arg in expr.args]
        return node
    if isinstance(expr, ResultReference):
        return {REF_KEY: expr.ref}
    if isinstance(expr, ValueExpr):
        return expr.value
    if isinstance(expr, ArrayExpr):
        return [expression_to_json(item) for item in expr.items]
    if isinstance(expr, ObjectExpr):
        return {key: expression_to_json(value) for key, value in expr.fields}
    if isinstance(expr, UnknownExpr):
        return expr.source
    raise TypeError(f"Not an expression: {type(expr).__name__}")
