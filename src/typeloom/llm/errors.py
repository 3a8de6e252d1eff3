"""Errors raised by language model backends.

Every HTTP failure from the completions endpoint maps to one class below,
carrying the status code and response body. ``retryable`` tells the
client's retry policy whether another attempt can succeed; the translation
loop never retries these, they escape translate() unchanged.
"""

from __future__ import annotations

from typeloom.exceptions import TypeloomError

_MAX_BODY_IN_MESSAGE = 500


class LLMClientError(TypeloomError):
    """A model backend failed to produce a completion.

    Attributes:
        status_code: HTTP status of the failed response, if there was one.
        body: Response body text, if there was one.
    """

    retryable = False

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        if status_code is not None:
            message = f"HTTP {status_code}: {message}"
        if body:
            message = f"{message} - {body[:_MAX_BODY_IN_MESSAGE]}"
        super().__init__(message)


class LLMConfigError(LLMClientError):
    """The model cannot be configured, e.g. no API key."""


class LLMAuthError(LLMClientError):
    """The endpoint rejected the credentials (401/403)."""


class LLMRequestError(LLMClientError):
    """The endpoint rejected the request itself (4xx other than auth and 429)."""


class LLMRateLimitError(LLMClientError):
    """The endpoint is throttling requests (429).

    Attributes:
        retry_after: Seconds the server asked us to wait, or None.
    """

    retryable = True

    def __init__(self, body: str | None = None, retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        message = "rate limited"
        if retry_after is not None:
            message = f"rate limited, retry after {retry_after:g}s"
        super().__init__(message, status_code=429, body=body)


class LLMServerError(LLMClientError):
    """The endpoint failed on its side (5xx)."""

    retryable = True


class LLMResponseError(LLMClientError):
    """A 2xx response whose body is not a usable chat completion."""
