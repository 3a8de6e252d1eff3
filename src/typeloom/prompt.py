"""Prompt model: an ordered, mutable list of role-tagged sections.

A Prompt is owned by a single translate() call. Repair rounds append the
model's raw response followed by a repair instruction, and trim() drops the
previous pair before the next round so the prompt stays bounded.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass


class PromptRole(str, enum.Enum):
    """Who authored a prompt section."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class PromptSection:
    """One role-tagged block of prompt text."""

    role: PromptRole
    content: str

    @classmethod
    def user(cls, content: str) -> PromptSection:
        return cls(PromptRole.USER, content)

    @classmethod
    def assistant(cls, content: str) -> PromptSection:
        return cls(PromptRole.ASSISTANT, content)

    @classmethod
    def system(cls, content: str) -> PromptSection:
        return cls(PromptRole.SYSTEM, content)

    def to_message(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class Prompt:
    """Chronologically ordered prompt sections.

    Usage::

        prompt = Prompt("draw a green square")
        prompt.append_response('{"shape": "square"}')
        prompt.append("You forgot the size")
        prompt.trim(2)
    """

    def __init__(self, sections: str | PromptSection | Iterable[PromptSection] | None = None) -> None:
        self._sections: list[PromptSection] = []
        if sections is None:
            return
        if isinstance(sections, str):
            self.append(sections)
        elif isinstance(sections, PromptSection):
            self.append(sections)
        else:
            self.extend(sections)

    def append(self, section: str | PromptSection) -> None:
        """Append a section. Plain strings become user sections."""
        if isinstance(section, str):
            section = PromptSection.user(section)
        self._sections.append(section)

    def append_response(self, text: str) -> None:
        """Append a model response as an assistant section."""
        self._sections.append(PromptSection.assistant(text))

    def extend(self, sections: Iterable[PromptSection | str]) -> None:
        for section in sections:
            self.append(section)

    def trim(self, count: int) -> None:
        """Remove the last ``count`` sections (fewer if the prompt is shorter)."""
        if count <= 0:
            return
        del self._sections[-count:]

    def to_messages(self) -> list[dict[str, str]]:
        """Render sections as chat-completion message dicts."""
        return [section.to_message() for section in self._sections]

    @property
    def sections(self) -> tuple[PromptSection, ...]:
        return tuple(self._sections)

    @property
    def last(self) -> PromptSection | None:
        return self._sections[-1] if self._sections else None

    def __len__(self) -> int:
        return len(self._sections)

    def __iter__(self) -> Iterator[PromptSection]:
        return iter(self._sections)

    def __getitem__(self, index: int) -> PromptSection:
        return self._sections[index]

    def __str__(self) -> str:
        return "\n".join(section.content for section in self._sections)

    def __repr__(self) -> str:
        return f"Prompt({len(self._sections)} sections)"
