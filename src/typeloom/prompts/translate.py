"""Request and repair prompts for JSON translation.

The request prompt gives the model the schema and the user's request and
asks for a single JSON value. The repair prompt follows the model's own
(invalid) response in the conversation and explains what was wrong with it.
"""

from __future__ import annotations

from collections.abc import Iterable

from typeloom.prompt import Prompt, PromptSection
from typeloom.schema import SchemaText

REQUEST_TEMPLATE = '''You are a service that translates user requests into JSON objects of type "{type_name}" according to the following {lang} definitions:
```
{schema}
```
The following is a user request:
"""
{request}
"""
The following is the user request translated into a JSON object with 2 spaces of indentation and no properties with the value undefined:
'''

REPAIR_TEMPLATE = '''The JSON object is invalid for the following reason:
"""
{diagnosis}
"""
The following is a revised JSON object:
'''


def build_request_prompt(schema: SchemaText, request: str) -> str:
    """Build the instruction text for an initial translation request."""
    return REQUEST_TEMPLATE.format(
        type_name=schema.type_name,
        lang=_language_label(schema.lang),
        schema=schema.text,
        request=request,
    )


def build_repair_prompt(diagnosis: str) -> str:
    """Build the instruction text that asks the model to fix its last answer."""
    return REPAIR_TEMPLATE.format(diagnosis=diagnosis)


class JsonTranslatorPrompts:
    """Default prompt strategy used by JsonTranslator.

    Subclass and override either method to customize the wording; the
    translator only relies on the return types.
    """

    def create_request_prompt(
        self,
        schema: SchemaText,
        request: str,
        preamble: Iterable[PromptSection | str] | None = None,
    ) -> Prompt:
        prompt = Prompt()
        if preamble:
            prompt.extend(preamble)
        prompt.append(build_request_prompt(schema, request))
        return prompt

    def create_repair_prompt(
        self,
        schema: SchemaText,
        response: str,
        diagnosis: str,
    ) -> PromptSection:
        # The response itself is appended separately as an assistant section.
        return PromptSection.user(build_repair_prompt(diagnosis))


def _language_label(lang: str) -> str:
    labels = {"typescript": "TypeScript", "json-schema": "JSON Schema"}
    return labels.get(lang.lower(), lang)


DEFAULT_PROMPTS = JsonTranslatorPrompts()
