"""Translate natural language requests into executable programs.

ProgramTranslator is a JsonTranslator whose target type is a Program. Its
validator checks the program against an Api before accepting it, so
unknown functions, wrong argument counts and forward references are sent
back to the model for repair instead of failing at evaluation time.
"""

from __future__ import annotations

import json
from typing import Any

from typeloom.exceptions import ErrorCode, ProgramError
from typeloom.llm.protocols import LanguageModel
from typeloom.program.api import Api
from typeloom.program.models import (
    ArrayExpr,
    Expression,
    FunctionCall,
    ObjectExpr,
    Program,
    ResultReference,
    UnknownExpr,
)
from typeloom.program.parser import parse_program
from typeloom.prompts.program import ProgramTranslatorPrompts
from typeloom.result import Result
from typeloom.schema import SchemaText
from typeloom.translator import JsonTranslator


class ProgramValidator:
    """TypeValidator producing Programs that are valid against an Api."""

    def __init__(self, api: Api) -> None:
        self.api = api

    @property
    def schema(self) -> SchemaText:
        # Rendered on demand so functions registered later are included.
        return SchemaText(text=self.api.describe(), lang="typescript", type_name="Program")

    def validate(self, json_text: str) -> Result[Program]:
        try:
            program = parse_program(json_text)
        except ProgramError as exc:
            return Result.error(str(exc), ErrorCode.SCHEMA_VALIDATION)

        problems: list[str] = []
        for index, call in enumerate(program.calls):
            self._check(call, index, problems)
        if problems:
            return Result.error("\n".join(problems), ErrorCode.SCHEMA_VALIDATION)
        return Result.success(program)

    def _check(self, expr: Expression, step_index: int, problems: list[str]) -> None:
        where = f"Step {step_index}"
        if isinstance(expr, FunctionCall):
            definition = self.api.resolve(expr.name)
            if definition is None:
                problems.append(f"{where}: '{expr.name}' is not a function in the {self.api.name} API")
            elif definition.arity != len(expr.args):
                problems.append(
                    f"{where}: '{expr.name}' expects {definition.arity} argument(s) "
                    f"({', '.join(definition.parameters)}), got {len(expr.args)}"
                )
            for arg in expr.args:
                self._check(arg, step_index, problems)
        elif isinstance(expr, ResultReference):
            if expr.ref >= step_index:
                problems.append(
                    f"{where}: '@ref' {expr.ref} must refer to an earlier step "
                    f"(0 to {step_index - 1})"
                    if step_index > 0
                    else f"{where}: '@ref' {expr.ref} is not allowed in the first step"
                )
        elif isinstance(expr, ArrayExpr):
            for item in expr.items:
                self._check(item, step_index, problems)
        elif isinstance(expr, ObjectExpr):
            for _, value in expr.fields:
                self._check(value, step_index, problems)
        elif isinstance(expr, UnknownExpr):
            problems.append(f"{where}: unrecognized expression {json.dumps(expr.source, default=str)}")


class ProgramTranslator(JsonTranslator[Program]):
    """Translates requests into Programs that call functions of ``api``.

    Usage::

        translator = ProgramTranslator(model, api)
        program = await translator.translate("add 1 and 2, then double it")
        outcome = await Evaluator(api).run(program)
    """

    def __init__(self, model: LanguageModel, api: Api, **kwargs: Any) -> None:
        kwargs.setdefault("prompts", ProgramTranslatorPrompts())
        super().__init__(model, ProgramValidator(api), **kwargs)
        self.api = api
