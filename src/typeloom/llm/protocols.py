"""Language model protocol.

Anything with an async ``complete(prompt, settings)`` method returning the
completion text can drive a JsonTranslator. The built-in OpenAIModel
implements this protocol.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typeloom.config import TranslationSettings
    from typeloom.prompt import Prompt


@runtime_checkable
class LanguageModel(Protocol):
    """Protocol for pluggable text-generation backends."""

    async def complete(
        self,
        prompt: Prompt,
        settings: TranslationSettings | None = None,
    ) -> str:
        """Send the prompt and return the completion text.

        Implementations raise (typically an LLMClientError) on provider
        failure; the translation loop does not retry such errors.
        """
        ...
