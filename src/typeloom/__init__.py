"""typeloom: typed values and executable plans from natural language.

A JsonTranslator prompts a language model with a schema, validates the JSON
it returns, and repairs invalid answers by sending the validation errors
back to the model. A ProgramTranslator does the same for JSON programs,
which an Evaluator then runs against a registry of Python functions.
"""

from typeloom._version import __version__

# Translation
from typeloom.translator import DEFAULT_MAX_REPAIR_ATTEMPTS, JsonTranslator
from typeloom.prompt import Prompt, PromptRole, PromptSection
from typeloom.prompts.translate import JsonTranslatorPrompts
from typeloom.response import JsonResponse, JsonResponseKind
from typeloom.result import Result
from typeloom.schema import SchemaText
from typeloom.validation import (
    ConstraintsValidator,
    FunctionConstraintsValidator,
    PydanticValidator,
    TypeValidator,
    ValidationPipeline,
)

# Configuration and models
from typeloom.config import ModelConfig, TranslationSettings
from typeloom.llm import LanguageModel, OpenAIModel

# Programs
from typeloom.program import (
    Api,
    EvaluationResult,
    Evaluator,
    FunctionDefinition,
    Program,
    ProgramTranslator,
    ProgramValidator,
    evaluate,
    parse_program,
    write_program,
)

# Errors
from typeloom.exceptions import (
    ArityMismatchError,
    ErrorCode,
    FunctionNotFoundError,
    InvalidResultReferenceError,
    OperationCancelledError,
    ProgramError,
    ProgramParseError,
    StepInvocationError,
    TranslationError,
    TypeloomError,
    UnrecognizedExpressionError,
)

__all__ = [
    "__version__",
    "Api",
    "ArityMismatchError",
    "ConstraintsValidator",
    "DEFAULT_MAX_REPAIR_ATTEMPTS",
    "ErrorCode",
    "EvaluationResult",
    "Evaluator",
    "FunctionConstraintsValidator",
    "FunctionDefinition",
    "FunctionNotFoundError",
    "InvalidResultReferenceError",
    "JsonResponse",
    "JsonResponseKind",
    "JsonTranslator",
    "JsonTranslatorPrompts",
    "LanguageModel",
    "ModelConfig",
    "OpenAIModel",
    "OperationCancelledError",
    "Program",
    "ProgramError",
    "ProgramParseError",
    "ProgramTranslator",
    "ProgramValidator",
    "Prompt",
    "PromptRole",
    "PromptSection",
    "PydanticValidator",
    "Result",
    "SchemaText",
    "StepInvocationError",
    "TranslationError",
    "TranslationSettings",
    "TypeValidator",
    "TypeloomError",
    "UnrecognizedExpressionError",
    "ValidationPipeline",
    "evaluate",
    "parse_program",
    "write_program",
]
