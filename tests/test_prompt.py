"""Tests for Prompt, PromptSection and the request/repair templates."""

from __future__ import annotations

from typeloom.prompt import Prompt, PromptRole, PromptSection
from typeloom.prompts.translate import (
    DEFAULT_PROMPTS,
    build_repair_prompt,
    build_request_prompt,
)
from typeloom.schema import SchemaText


class TestPrompt:
    def test_string_becomes_user_section(self):
        prompt = Prompt("hello")
        assert len(prompt) == 1
        assert prompt[0] == PromptSection(PromptRole.USER, "hello")

    def test_append_response_is_assistant(self):
        prompt = Prompt("q")
        prompt.append_response("a")
        assert prompt.last.role is PromptRole.ASSISTANT
        assert prompt.to_messages() == [
            {"role": "user", "content": "q"},
            {"role": "assistant", "content": "a"},
        ]

    def test_trim_removes_trailing_sections(self):
        prompt = Prompt(["a", "b", "c", "d"])
        prompt.trim(2)
        assert [s.content for s in prompt] == ["a", "b"]

    def test_trim_more_than_length(self):
        prompt = Prompt(["a"])
        prompt.trim(5)
        assert len(prompt) == 0

    def test_trim_zero_is_noop(self):
        prompt = Prompt(["a", "b"])
        prompt.trim(0)
        assert len(prompt) == 2

    def test_sections_preserve_order(self):
        prompt = Prompt(PromptSection.system("sys"))
        prompt.append("user")
        prompt.append_response("assistant")
        assert [s.role for s in prompt.sections] == [
            PromptRole.SYSTEM,
            PromptRole.USER,
            PromptRole.ASSISTANT,
        ]


class TestTemplates:
    def test_request_prompt_contains_schema_and_request(self):
        schema = SchemaText("interface Shape { shape: string; }", type_name="Shape")
        text = build_request_prompt(schema, "a green square")
        assert 'type "Shape"' in text
        assert "TypeScript" in text
        assert "interface Shape { shape: string; }" in text
        assert "a green square" in text

    def test_json_schema_language_label(self):
        schema = SchemaText("{}", lang="json-schema")
        assert "JSON Schema" in build_request_prompt(schema, "x")

    def test_repair_prompt_contains_diagnosis(self):
        text = build_repair_prompt("size: Field required")
        assert "size: Field required" in text
        assert "revised JSON object" in text

    def test_preamble_comes_first(self):
        schema = SchemaText("{}")
        prompt = DEFAULT_PROMPTS.create_request_prompt(
            schema, "req", [PromptSection.system("be terse")]
        )
        assert len(prompt) == 2
        assert prompt[0].role is PromptRole.SYSTEM
        assert "req" in prompt[1].content

    def test_repair_section_is_user(self):
        section = DEFAULT_PROMPTS.create_repair_prompt(SchemaText("{}"), "{}", "bad")
        assert section.role is PromptRole.USER
        assert "bad" in section.content
