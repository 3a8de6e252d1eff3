"""Render programs as readable pseudo-code.

Used for logging and the CLI ``show`` command::

    step1 = getWeather("Seattle")
    step2 = summarize(step1, {"style": "short"})
"""

from __future__ import annotations

import json

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


def write_program(program: Program) -> str:
    """Return one ``stepN = call(...)`` line per step (1-based names)."""
    lines = [
        f"{_step_name(index)} = {write_expression(call)}"
        for index, call in enumerate(program.calls)
    ]
    return "\n".join(lines)


def write_expression(expr: Expression) -> str:
    if isinstance(expr, FunctionCall):
        return f"{expr.name}({', '.join(write_expression(arg) for arg in expr.args)})"
    if isinstance(expr, ResultReference):
        return _step_name(expr.ref)
    if isinstance(expr, ValueExpr):
        return json.dumps(expr.value)
    if isinstance(expr, ArrayExpr):
        return f"[{', '.join(write_expression(item) for item in expr.items)}]"
    if isinstance(expr, ObjectExpr):
        fields = ", ".join(f"{json.dumps(key)}: {write_expression(value)}" for key, value in expr.fields)
        return f"{{{fields}}}"
    if isinstance(expr, UnknownExpr):
        return f"<unknown {json.dumps(expr.source, default=str)}>"
    raise TypeError(f"Not an expression: {type(expr).__name__}")


def _step_name(index: int) -> str:
    return f"step{index + 1}"
