"""Built-in OpenAI-compatible async httpx model with tenacity retry.

Implements the LanguageModel protocol on top of the chat completions API.
Transient HTTP failures (429, 5xx, connection errors) are retried here;
they never reach the translation loop's repair logic.
"""

from __future__ import annotations

import email.utils
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import httpx
import tenacity

from typeloom.config import ModelConfig, TranslationSettings
from typeloom.llm.errors import (
    LLMAuthError,
    LLMClientError,
    LLMRateLimitError,
    LLMRequestError,
    LLMResponseError,
    LLMServerError,
)

if TYPE_CHECKING:
    from typeloom.prompt import Prompt

logger = logging.getLogger(__name__)

_TRANSIENT_TRANSPORT_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout, httpx.ReadTimeout)


def _should_retry(exc: BaseException) -> bool:
    """Retry throttling, server failures and transient transport errors."""
    if isinstance(exc, LLMClientError):
        return exc.retryable
    return isinstance(exc, _TRANSIENT_TRANSPORT_ERRORS)


def _retry_after_seconds(value: str | None) -> float | None:
    """Parse a Retry-After header given as seconds or as an HTTP date."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        when = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max((when - datetime.now(timezone.utc)).total_seconds(), 0.0)


def _error_for_status(response: httpx.Response) -> LLMClientError:
    """Map a non-2xx completions response to an LLMClientError subclass."""
    status = response.status_code
    body = response.text
    if status in (401, 403):
        return LLMAuthError("credentials rejected", status_code=status, body=body)
    if status == 429:
        return LLMRateLimitError(body, _retry_after_seconds(response.headers.get("Retry-After")))
    if status >= 500:
        return LLMServerError("server error", status_code=status, body=body)
    return LLMRequestError("request rejected", status_code=status, body=body)


class OpenAIModel:
    """Async httpx model for OpenAI-compatible chat completions.

    Usage::

        async with OpenAIModel.from_env() as model:
            translator = JsonTranslator(model, PydanticValidator(Shape))
            shape = await translator.translate("a green square of size 10")
    """

    def __init__(
        self,
        config: ModelConfig,
        *,
        client: httpx.AsyncClient | None = None,
        wait: tenacity.wait.wait_base | None = None,
    ) -> None:
        """Initialize the model.

        Args:
            config: Connection and default generation settings.
            client: Optional pre-built httpx client (e.g. with a mock
                transport). Owned by the caller when given.
            wait: Optional tenacity wait strategy between retries.
        """
        self.config = config
        self._base_url = config.base_url.rstrip("/")
        self._defaults = config.default_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.timeout)
        self._headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {config.api_key}",
        }
        self._wait = wait or (
            tenacity.wait_exponential(multiplier=1, min=1, max=30)
            + tenacity.wait_random(0, 2)
        )

    @classmethod
    def from_env(cls, **overrides: Any) -> OpenAIModel:
        """Create a model from TYPELOOM_* environment variables."""
        return cls(ModelConfig.from_env(**overrides))

    async def complete(
        self,
        prompt: Prompt,
        settings: TranslationSettings | None = None,
    ) -> str:
        """Send the prompt and return the assistant's text.

        Throttling (429), server errors (5xx) and transient transport errors
        are retried up to ``config.max_retries`` attempts in total.

        Raises:
            LLMAuthError: Credentials rejected (401/403); never retried.
            LLMRequestError: Any other 4xx; never retried.
            LLMRateLimitError: Still throttled after the last attempt.
            LLMServerError: Still failing after the last attempt.
            LLMResponseError: A 2xx body that is not a chat completion.
        """
        effective = self._defaults.merged(settings)
        retryer = tenacity.AsyncRetrying(
            retry=tenacity.retry_if_exception(_should_retry),
            wait=self._wait,
            stop=tenacity.stop_after_attempt(self.config.max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        data = await retryer(self._post_completion, prompt.to_messages(), effective)
        return self.extract_content(data)

    async def _post_completion(
        self,
        messages: list[dict[str, str]],
        settings: TranslationSettings,
    ) -> dict:
        """One POST to the completions endpoint, without retry."""
        payload: dict[str, Any] = {"messages": messages, **settings.to_payload()}
        logger.debug("POST chat/completions model=%s messages=%d", payload.get("model"), len(messages))

        response = await self._client.post(
            f"{self._base_url}/chat/completions",
            json=payload,
            headers=self._headers,
        )
        if not response.is_success:
            raise _error_for_status(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMResponseError(
                "completion body is not JSON", status_code=response.status_code, body=response.text
            ) from exc
        if not isinstance(data, dict) or "choices" not in data:
            raise LLMResponseError(
                "completion body has no 'choices'", status_code=response.status_code, body=response.text
            )
        return data

    @staticmethod
    def extract_content(response: dict) -> str:
        """Return the first choice's message content ('' when it is null).

        Raises:
            LLMResponseError: If the first choice has no message.
        """
        try:
            return response["choices"][0]["message"].get("content") or ""
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise LLMResponseError(f"no message in first choice ({exc!r})", body=str(response)) from exc

    async def aclose(self) -> None:
        """Close the underlying httpx client if this model created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> OpenAIModel:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
