"""Tests for the Api function registry and binder."""

from __future__ import annotations

import pytest

from typeloom.exceptions import ArityMismatchError, FunctionNotFoundError
from typeloom.program.api import Api


class Calculator:
    def add(self, a: int, b: int) -> int:
        """Add two integers.

        Longer explanation that should not appear in descriptions.
        """
        return a + b

    async def echo(self, text: str) -> str:
        return text

    def _private(self):
        return "hidden"


class TestRegistration:
    def test_register_records_parameters(self, math_api):
        definition = math_api.resolve("add")
        assert definition.parameters == ("a", "b")
        assert definition.arity == 2
        assert definition.description == "Add two numbers."

    def test_register_with_name(self):
        api = Api()
        api.register(lambda x: x, name="identity")
        assert "identity" in api

    def test_lambda_requires_name(self):
        with pytest.raises(ValueError, match="name is required"):
            Api().register(lambda x: x)

    def test_duplicate_name_rejected(self, math_api):
        with pytest.raises(ValueError, match="already registered"):
            math_api.register(lambda a, b: a, name="add")

    def test_keyword_only_rejected(self):
        def f(a, *, b):
            return a

        with pytest.raises(ValueError, match="unsupported parameter"):
            Api().register(f)

    def test_varargs_rejected(self):
        def f(*args):
            return args

        with pytest.raises(ValueError):
            Api().register(f)

    def test_unregister(self, math_api):
        math_api.unregister("add")
        assert math_api.resolve("add") is None

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            Api("")

    def test_from_object_registers_public_methods(self):
        api = Api.from_object(Calculator())
        assert api.name == "Calculator"
        assert sorted(api.function_names) == ["add", "echo"]
        assert api.resolve("add").parameters == ("a", "b")


class TestBinding:
    def test_bind_by_position(self, math_api):
        assert math_api.resolve("add").bind([1, 2]) == {"a": 1, "b": 2}

    @pytest.mark.parametrize("args", [[], [1], [1, 2, 3]])
    def test_arity_mismatch(self, math_api, args):
        with pytest.raises(ArityMismatchError) as exc_info:
            math_api.resolve("add").bind(args)
        assert exc_info.value.expected == 2
        assert exc_info.value.actual == len(args)
        assert isinstance(exc_info.value, FunctionNotFoundError)

    def test_require_missing(self, math_api):
        with pytest.raises(FunctionNotFoundError, match="nope"):
            math_api.require("nope")

    @pytest.mark.asyncio
    async def test_invoke_sync_and_async(self, math_api):
        assert await math_api.invoke("add", [2, 3]) == 5
        assert await math_api.invoke("neg", [4]) == -4

    @pytest.mark.asyncio
    async def test_invoke_bound_method(self):
        api = Api.from_object(Calculator())
        assert await api.invoke("echo", ["hi"]) == "hi"


class TestDescribe:
    def test_describe_interface(self):
        api = Api.from_object(Calculator())
        text = api.describe()
        assert text.startswith("interface Calculator {")
        assert "// Add two integers." in text
        assert "add(a: number, b: number): number;" in text
        assert "echo(text: string): string;" in text
        assert "Longer explanation" not in text
        assert text.endswith("}")

    def test_unannotated_is_any(self):
        api = Api()
        api.register(lambda value: value, name="identity")
        assert "identity(value: any): any;" in api.describe()
