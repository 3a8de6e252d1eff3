"""Schema text given to the model inside prompts.

The text is opaque to the translation loop: it is spliced into request and
repair prompts verbatim. ``from_model`` is a convenience that renders a
pydantic model's JSON Schema; any other schema language works as long as
the model understands it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from pydantic import TypeAdapter


@dataclass(frozen=True)
class SchemaText:
    """A schema description plus the name of the language it is written in.

    Attributes:
        text: The schema itself.
        lang: Language tag used in prompts (e.g. "typescript", "json-schema").
        type_name: Name of the root type the model should produce.
    """

    text: str
    lang: str = "typescript"
    type_name: str = "Response"

    @classmethod
    def from_model(cls, model: Any, *, type_name: str | None = None) -> SchemaText:
        """Render the JSON Schema of a pydantic model or any type pydantic accepts."""
        schema = TypeAdapter(model).json_schema()
        name = type_name or schema.get("title") or getattr(model, "__name__", "Response")
        return cls(
            text=json.dumps(schema, indent=2),
            lang="json-schema",
            type_name=name,
        )

    def __str__(self) -> str:
        return self.text
