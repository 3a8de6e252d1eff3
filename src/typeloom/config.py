"""Configuration models for typeloom.

TranslationSettings holds per-request generation settings.
ModelConfig holds connection settings for the built-in OpenAI-compatible
model and can be read from the environment.
"""

from __future__ import annotations

import os
import types
from dataclasses import dataclass, replace
from typing import Any, Optional

from pydantic import BaseModel

ENV_API_KEY = "TYPELOOM_OPENAI_API_KEY"
ENV_BASE_URL = "TYPELOOM_OPENAI_BASE_URL"
ENV_MODEL = "TYPELOOM_MODEL"

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"


@dataclass(frozen=True)
class TranslationSettings:
    """Generation settings sent with each completion request.

    All fields are optional -- None means 'use the model's default'.

    Example::

        settings = TranslationSettings(temperature=0.0, max_tokens=500)
    """

    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    stop_sequences: tuple[str, ...] | None = None
    extra: dict | None = None

    def __post_init__(self) -> None:
        if self.extra is not None:
            object.__setattr__(self, "extra", types.MappingProxyType(dict(self.extra)))
        if self.stop_sequences is not None and not isinstance(self.stop_sequences, tuple):
            object.__setattr__(self, "stop_sequences", tuple(self.stop_sequences))

    def merged(self, override: TranslationSettings | None) -> TranslationSettings:
        """Return a copy with every non-None field of ``override`` applied."""
        if override is None:
            return self
        changes = {
            name: getattr(override, name)
            for name in ("model", "temperature", "max_tokens", "stop_sequences", "extra")
            if getattr(override, name) is not None
        }
        return replace(self, **changes)

    def to_payload(self) -> dict[str, Any]:
        """Render the non-None settings as chat-completion request fields."""
        payload: dict[str, Any] = {}
        if self.model is not None:
            payload["model"] = self.model
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens
        if self.stop_sequences:
            payload["stop"] = list(self.stop_sequences)
        if self.extra:
            payload.update(self.extra)
        return payload


class ModelConfig(BaseModel):
    """Connection settings for OpenAIModel."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout: float = 120.0
    max_retries: int = 3
    temperature: Optional[float] = 0.0
    max_tokens: Optional[int] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> ModelConfig:
        """Build a config from TYPELOOM_* environment variables.

        Keyword overrides that are not None win over the environment.

        Raises:
            LLMConfigError: If no API key is provided or found.
        """
        from typeloom.llm.errors import LLMConfigError

        values: dict[str, Any] = {
            "api_key": os.environ.get(ENV_API_KEY, ""),
            "base_url": os.environ.get(ENV_BASE_URL, DEFAULT_BASE_URL),
            "model": os.environ.get(ENV_MODEL, DEFAULT_MODEL),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        if not values["api_key"]:
            raise LLMConfigError(
                f"No API key provided. Pass api_key= or set {ENV_API_KEY} "
                "environment variable."
            )
        return cls(**values)

    def default_settings(self) -> TranslationSettings:
        return TranslationSettings(
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
