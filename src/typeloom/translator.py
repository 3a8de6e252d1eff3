"""JsonTranslator: natural-language requests in, typed values out.

Translation works as follows:

1. The model is given the schema of the target type and the request, and
   asked to answer with JSON.
2. The JSON is extracted from the response and validated into the target
   type, then optionally checked by a constraints validator.
3. Because models are stochastic, validation failures are expected. The
   translator sends the failure back to the model and asks for a revised
   answer, up to ``max_repair_attempts`` times.

Each repair round keeps only the latest failed response and its repair
instruction in the prompt, so the prompt does not grow with the number of
rounds.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any, Callable, Generic, TypeVar

from typeloom.cancellation import await_or_cancel
from typeloom.config import TranslationSettings
from typeloom.exceptions import ErrorCode, TranslationError
from typeloom.llm.protocols import LanguageModel
from typeloom.prompt import Prompt, PromptSection
from typeloom.prompts.translate import DEFAULT_PROMPTS, JsonTranslatorPrompts
from typeloom.response import JsonResponse, JsonResponseKind
from typeloom.result import Result
from typeloom.validation import ConstraintsValidator, TypeValidator, ValidationPipeline

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_REPAIR_ATTEMPTS = 1

# Sections appended per repair round: the raw response and the repair prompt.
_SECTIONS_PER_REPAIR = 2


class JsonTranslator(Generic[T]):
    """Translates natural language requests into values of type T.

    A translator holds read-only configuration, so one instance may serve
    concurrent translate() calls. Prompts and repair counters are local to
    each call.

    Usage::

        translator = JsonTranslator(model, PydanticValidator(Shape))
        translator.on_attempting_repair.append(lambda msg: print("repair:", msg))
        shape = await translator.translate("a green square of size 10")
    """

    def __init__(
        self,
        model: LanguageModel,
        validator: TypeValidator[T],
        *,
        prompts: JsonTranslatorPrompts | None = None,
        constraints_validator: ConstraintsValidator[T] | None = None,
        settings: TranslationSettings | None = None,
        max_repair_attempts: int = DEFAULT_MAX_REPAIR_ATTEMPTS,
    ) -> None:
        if model is None:
            raise ValueError("model is required")
        if validator is None:
            raise ValueError("validator is required")
        self.model = model
        self.validator = validator
        self.prompts = prompts or DEFAULT_PROMPTS
        self.constraints_validator = constraints_validator
        self.settings = settings or TranslationSettings()
        self.max_repair_attempts = max_repair_attempts

        # Observer lists, invoked in registration order. Exceptions raised by
        # an observer are logged and discarded.
        self.on_sending_prompt: list[Callable[[Prompt], Any]] = []
        self.on_completion_received: list[Callable[[str], Any]] = []
        self.on_attempting_repair: list[Callable[[str], Any]] = []

    @property
    def max_repair_attempts(self) -> int:
        return self._max_repair_attempts

    @max_repair_attempts.setter
    def max_repair_attempts(self, value: int) -> None:
        self._max_repair_attempts = max(int(value), 0)

    async def translate(
        self,
        request: str,
        *,
        preamble: Iterable[PromptSection | str] | None = None,
        settings: TranslationSettings | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> T:
        """Translate a natural language request into a value of type T.

        Args:
            request: The user's request text.
            preamble: Optional sections placed before the request (e.g.
                system instructions or conversation history).
            settings: Per-call settings merged over the translator's own.
            cancel_event: Optional event; when set, the loop stops before
                its next model call or abandons the one in flight.

        Returns:
            The validated value.

        Raises:
            TranslationError: If no valid value was produced within the
                repair budget.
            OperationCancelledError: If ``cancel_event`` was set.
            LLMClientError: Propagated unchanged from the model.
        """
        if not request:
            raise ValueError("request must be a non-empty string")

        effective = self.settings.merged(settings)
        prompt = self.create_request_prompt(request, preamble)
        pipeline = ValidationPipeline(
            self.validator,
            self.constraints_validator,
            self.on_validation_complete,
        )
        repair_attempts = 0

        while True:
            response_text = await await_or_cancel(
                self.get_response(prompt, effective), cancel_event, "translate"
            )
            json_response = JsonResponse.parse(response_text)
            validation = self._validate_response(json_response, pipeline)
            if validation.ok:
                logger.debug("Translation succeeded after %d repair attempt(s)", repair_attempts)
                return validation.value

            repair_attempts += 1
            if repair_attempts > self._max_repair_attempts:
                logger.debug("Repair budget exhausted: %s", validation.message)
                raise TranslationError(
                    request=request,
                    response=response_text,
                    diagnosis=validation.message,
                    attempts=repair_attempts - 1,
                    code=validation.code,
                )

            logger.debug("Repair attempt %d: %s", repair_attempts, validation.message)
            self._notify(self.on_attempting_repair, validation.message)

            repair_section = self.create_repair_prompt(response_text, validation)
            if repair_attempts > 1:
                prompt.trim(_SECTIONS_PER_REPAIR)
            prompt.append_response(response_text)
            prompt.append(repair_section)

    def create_request_prompt(
        self,
        request: str,
        preamble: Iterable[PromptSection | str] | None = None,
    ) -> Prompt:
        return self.prompts.create_request_prompt(self.validator.schema, request, preamble)

    def create_repair_prompt(self, response_text: str, validation: Result[T]) -> PromptSection:
        return self.prompts.create_repair_prompt(
            self.validator.schema, response_text, validation.message
        )

    async def get_response(self, prompt: Prompt, settings: TranslationSettings) -> str:
        """Send the prompt to the model, notifying observers on both sides."""
        self._notify(self.on_sending_prompt, prompt)
        response_text = await self.model.complete(prompt, settings)
        self._notify(self.on_completion_received, response_text)
        return response_text

    def on_validation_complete(self, result: Result[T]) -> bool:
        """Gate called after type validation.

        Return False to skip constraints validation and use ``result`` as is.
        Subclasses override this; the default always continues.
        """
        return True

    def _validate_response(
        self, json_response: JsonResponse, pipeline: ValidationPipeline[T]
    ) -> Result[T]:
        if json_response.kind is JsonResponseKind.COMPLETE_JSON:
            return pipeline.validate(json_response.json or "")
        if json_response.kind is JsonResponseKind.PARTIAL_JSON:
            return Result.error(
                "The response contains incomplete JSON. The JSON value was "
                "truncated before its closing bracket.",
                ErrorCode.INCOMPLETE_JSON,
            )
        return Result.error("The response does not contain any JSON.", ErrorCode.NO_JSON)

    @staticmethod
    def _notify(observers: list[Callable[[Any], Any]], payload: Any) -> None:
        for observer in list(observers):
            try:
                observer(payload)
            except Exception:
                logger.debug("Observer %r raised; ignoring", observer, exc_info=True)
