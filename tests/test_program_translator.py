"""Tests for ProgramTranslator and ProgramValidator."""

from __future__ import annotations

import json

import pytest

from typeloom.exceptions import TranslationError
from typeloom.program.evaluator import Evaluator
from typeloom.program.models import Program
from typeloom.program.translator import ProgramTranslator, ProgramValidator


def dumps(document: dict) -> str:
    return json.dumps(document, indent=2)


class TestProgramValidator:
    def test_valid_program(self, math_api):
        result = ProgramValidator(math_api).validate(
            dumps({"@steps": [{"@func": "add", "@args": [1, 2]}]})
        )
        assert result.ok
        assert isinstance(result.value, Program)

    def test_schema_describes_api(self, math_api):
        schema = ProgramValidator(math_api).schema
        assert schema.type_name == "Program"
        assert "interface MathApi {" in schema.text
        assert "add(a: number, b: number): number;" in schema.text

    def test_unknown_function(self, math_api):
        result = ProgramValidator(math_api).validate(dumps({"@steps": [{"@func": "sqrt", "@args": [4]}]}))
        assert not result.ok
        assert "Step 0" in result.message
        assert "'sqrt' is not a function" in result.message

    def test_arity(self, math_api):
        result = ProgramValidator(math_api).validate(dumps({"@steps": [{"@func": "add", "@args": [1]}]}))
        assert not result.ok
        assert "expects 2 argument(s) (a, b), got 1" in result.message

    def test_forward_reference(self, math_api):
        document = {
            "@steps": [
                {"@func": "neg", "@args": [1]},
                {"@func": "neg", "@args": [{"@ref": 1}]},
            ]
        }
        result = ProgramValidator(math_api).validate(dumps(document))
        assert not result.ok
        assert "Step 1: '@ref' 1 must refer to an earlier step (0 to 0)" in result.message

    def test_reference_in_first_step(self, math_api):
        document = {"@steps": [{"@func": "neg", "@args": [{"@ref": 0}]}]}
        result = ProgramValidator(math_api).validate(dumps(document))
        assert "not allowed in the first step" in result.message

    def test_nested_problems_are_reported(self, math_api):
        document = {
            "@steps": [
                {"@func": "pack", "@args": [[{"@func": "nope"}], {"k": {"@ref": "x"}}]},
            ]
        }
        result = ProgramValidator(math_api).validate(dumps(document))
        assert "'nope' is not a function" in result.message
        assert "unrecognized expression" in result.message

    def test_parse_errors_become_diagnostics(self, math_api):
        validator = ProgramValidator(math_api)
        assert "@steps" in validator.validate('{"steps": []}').message
        assert not validator.validate('{"@steps": [{"@func": "neg", "@args": [{"@ref": -1}]}]}').ok


class TestProgramTranslator:
    @pytest.mark.asyncio
    async def test_translate_and_run(self, scripted, math_api):
        document = {
            "@steps": [
                {"@func": "add", "@args": [1, 2]},
                {"@func": "mul", "@args": [{"@ref": 0}, 2]},
            ]
        }
        model = scripted([dumps(document)])
        translator = ProgramTranslator(model, math_api)

        program = await translator.translate("add 1 and 2, then double it")
        outcome = await Evaluator(math_api).run(program)

        assert outcome.value == 6
        request_text = model.prompts[0][-1]["content"]
        assert '"@steps": FunctionCall[];' in request_text
        assert "interface MathApi {" in request_text
        assert "add 1 and 2, then double it" in request_text

    @pytest.mark.asyncio
    async def test_invalid_program_is_repaired(self, scripted, math_api):
        bad = {"@steps": [{"@func": "sqrt", "@args": [4]}]}
        good = {"@steps": [{"@func": "mul", "@args": [2, 2]}]}
        model = scripted([dumps(bad), dumps(good)])
        translator = ProgramTranslator(model, math_api)

        program = await translator.translate("square 2")

        assert program.calls[0].name == "mul"
        repair_text = model.prompts[1][-1]["content"]
        assert "'sqrt' is not a function" in repair_text
        assert "revised JSON program object" in repair_text

    @pytest.mark.asyncio
    async def test_exhausted(self, scripted, math_api):
        bad = dumps({"@steps": [{"@func": "sqrt"}]})
        translator = ProgramTranslator(scripted([bad]), math_api, max_repair_attempts=0)
        with pytest.raises(TranslationError):
            await translator.translate("square root of 4")
