"""Shared test fixtures for typeloom.

Provides a scripted LanguageModel, a small pydantic target type, and a
math Api used by the program tests.
"""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from typeloom.program.api import Api


class Shape(BaseModel):
    shape: str
    color: str
    size: float


class ScriptedModel:
    """LanguageModel that replays canned responses and records prompts.

    A response that is an Exception instance is raised instead of returned.
    """

    def __init__(self, responses: list):
        self._responses = list(responses)
        self.prompts: list[list[dict[str, str]]] = []
        self.settings: list = []

    async def complete(self, prompt, settings=None) -> str:
        self.prompts.append(prompt.to_messages())
        self.settings.append(settings)
        if not self._responses:
            raise AssertionError("ScriptedModel ran out of responses")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def calls(self) -> int:
        return len(self.prompts)


@pytest.fixture
def scripted():
    """Factory fixture: scripted(["resp1", "resp2"]) -> ScriptedModel."""
    return ScriptedModel


@pytest.fixture
def shape_type():
    return Shape


def build_math_api() -> Api:
    api = Api("MathApi")

    def add(a: float, b: float) -> float:
        """Add two numbers."""
        return a + b

    def mul(a: float, b: float) -> float:
        """Multiply two numbers."""
        return a * b

    async def neg(a: float) -> float:
        """Negate a number."""
        return -a

    def fail(message: str) -> None:
        raise RuntimeError(message)

    def pack(items: list, options: dict) -> dict:
        return {"items": items, "options": options}

    for handler in (add, mul, neg, fail, pack):
        api.register(handler)
    return api


@pytest.fixture
def math_api() -> Api:
    return build_math_api()
