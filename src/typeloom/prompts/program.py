"""Prompts for translating requests into JSON programs.

The program schema describes the ``@steps``/``@func``/``@args``/``@ref``
format; the API schema (rendered from an Api registry) lists the functions
a program may call.
"""

from __future__ import annotations

from collections.abc import Iterable

from typeloom.prompt import Prompt, PromptSection
from typeloom.prompts.translate import JsonTranslatorPrompts
from typeloom.schema import SchemaText

PROGRAM_SCHEMA = """// A program consists of a sequence of function calls that are evaluated in order.
export type Program = {
  "@steps": FunctionCall[];
}

// A function call specifies a function name and a list of argument expressions. Arguments may contain
// nested function calls and result references.
export type FunctionCall = {
  // Name of the function
  "@func": string;
  // Arguments for the function, if any
  "@args"?: Expression[];
};

// An expression is a JSON value, a function call, or a reference to the result of a preceding expression.
export type Expression = JsonValue | FunctionCall | ResultReference;

// A JSON value is a string, a number, a boolean, null, an object, or an array. Function calls and result
// references can be nested in objects and arrays.
export type JsonValue = string | number | boolean | null | { [x: string]: Expression } | Expression[];

// A result reference represents the value of an expression from a preceding step.
export type ResultReference = {
  // Index of the previous expression in the "@steps" array
  "@ref": number;
};"""

PROGRAM_REQUEST_TEMPLATE = '''You are a service that translates user requests into programs represented as JSON using the following TypeScript definitions:
```
{program_schema}
```
The programs can call functions from the API defined in the following TypeScript definitions:
```
{api_schema}
```
The following is a user request:
"""
{request}
"""
The following is the user request translated into a JSON program object with 2 spaces of indentation and no properties with the value undefined:
'''

PROGRAM_REPAIR_TEMPLATE = '''The JSON program object is invalid for the following reason:
"""
{diagnosis}
"""
The following is a revised JSON program object:
'''


def build_program_request_prompt(api_schema: str, request: str) -> str:
    return PROGRAM_REQUEST_TEMPLATE.format(
        program_schema=PROGRAM_SCHEMA,
        api_schema=api_schema,
        request=request,
    )


class ProgramTranslatorPrompts(JsonTranslatorPrompts):
    """Prompt strategy for ProgramTranslator.

    The schema passed in is the API description; the fixed program schema
    is always included alongside it.
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
        prompt.append(build_program_request_prompt(schema.text, request))
        return prompt

    def create_repair_prompt(
        self,
        schema: SchemaText,
        response: str,
        diagnosis: str,
    ) -> PromptSection:
        return PromptSection.user(PROGRAM_REPAIR_TEMPLATE.format(diagnosis=diagnosis))
