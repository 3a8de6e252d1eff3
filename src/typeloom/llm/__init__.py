"""Language model integration: protocol, OpenAI-compatible client, errors."""

from typeloom.llm.client import OpenAIModel
from typeloom.llm.errors import (
    LLMAuthError,
    LLMClientError,
    LLMConfigError,
    LLMRateLimitError,
    LLMRequestError,
    LLMResponseError,
    LLMServerError,
)
from typeloom.llm.protocols import LanguageModel

__all__ = [
    "LanguageModel",
    "OpenAIModel",
    "LLMClientError",
    "LLMConfigError",
    "LLMAuthError",
    "LLMRequestError",
    "LLMRateLimitError",
    "LLMServerError",
    "LLMResponseError",
]
