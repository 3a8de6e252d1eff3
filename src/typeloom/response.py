"""Extraction of JSON from raw model output.

Models often wrap their JSON in explanations or Markdown fences. JsonResponse
locates the first JSON object or array in the text by bracket matching and
classifies the result as missing, truncated, or complete.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass

_OPENERS = {"{": "}", "[": "]"}


class JsonResponseKind(str, enum.Enum):
    """Classification of a model response."""

    NO_JSON = "no_json"
    PARTIAL_JSON = "partial_json"
    COMPLETE_JSON = "complete_json"


@dataclass(frozen=True)
class JsonResponse:
    """Read-only view over a raw model response.

    Attributes:
        text: The original response text.
        json: The extracted JSON substring. For partial responses this is
            the truncated tail and is kept for diagnostics only.
        kind: How much JSON was found.
    """

    text: str
    json: str | None
    kind: JsonResponseKind

    @property
    def has_json(self) -> bool:
        return self.kind is not JsonResponseKind.NO_JSON

    @property
    def has_complete_json(self) -> bool:
        return self.kind is JsonResponseKind.COMPLETE_JSON

    @classmethod
    def parse(cls, text: str | None) -> JsonResponse:
        """Locate and classify the first JSON value in ``text``.

        Bracket depth is tracked outside of string literals only, so braces
        inside JSON strings (or escaped quotes) do not confuse the match.
        A balanced span that does not decode (prose such as ``[see note]``)
        is skipped and the scan resumes after it. If no span decodes, the
        first balanced one is returned as complete so the validator reports
        the syntax error. A span still open at the end of the text is
        partial.
        """
        text = text or ""
        first_balanced: str | None = None
        start = _find_opening(text, 0)
        while start >= 0:
            end = _find_closing(text, start)
            if end < 0:
                return cls(text=text, json=text[start:], kind=JsonResponseKind.PARTIAL_JSON)
            candidate = text[start : end + 1]
            if _decodes(candidate):
                return cls(text=text, json=candidate, kind=JsonResponseKind.COMPLETE_JSON)
            if first_balanced is None:
                first_balanced = candidate
            start = _find_opening(text, end + 1)

        if first_balanced is not None:
            return cls(text=text, json=first_balanced, kind=JsonResponseKind.COMPLETE_JSON)
        return cls(text=text, json=None, kind=JsonResponseKind.NO_JSON)

    def __str__(self) -> str:
        return self.json if self.json is not None else self.text


def _find_opening(text: str, offset: int) -> int:
    positions = [pos for pos in (text.find("{", offset), text.find("[", offset)) if pos >= 0]
    return min(positions) if positions else -1


def _find_closing(text: str, start: int) -> int:
    """Index of the bracket closing the one at ``start``, or -1 if none.

    Closers of the wrong kind are treated as ordinary characters.
    """
    stack: list[str] = []
    in_string = False
    escaped = False
    for pos in range(start, len(text)):
        char = text[pos]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _OPENERS:
            stack.append(_OPENERS[char])
        elif stack and char == stack[-1]:
            stack.pop()
            if not stack:
                return pos
    return -1


def _decodes(candidate: str) -> bool:
    try:
        json.loads(candidate)
    except ValueError:
        return False
    return True
