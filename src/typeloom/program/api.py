"""Function registry for program evaluation.

An Api maps function names to FunctionDefinitions. Each definition records
the callable's ordered parameter names so the binder can check arity before
invoking, instead of silently padding or truncating arguments.

Handlers may be plain functions or coroutine functions.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from typeloom.exceptions import ArityMismatchError, FunctionNotFoundError

logger = logging.getLogger(__name__)

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)

# Python annotation -> TypeScript-like type name used in API descriptions.
_TYPE_NAMES: dict[Any, str] = {
    str: "string",
    int: "number",
    float: "number",
    bool: "boolean",
    list: "any[]",
    dict: "object",
    type(None): "void",
}


@dataclass(frozen=True)
class FunctionDefinition:
    """A callable exposed to programs.

    Attributes:
        name: Name programs use in ``@func``.
        parameters: Ordered positional parameter names.
        handler: The callable. May return an awaitable.
        description: One-line description shown to the model.
        signature: The handler's signature, for rendering descriptions.
    """

    name: str
    parameters: tuple[str, ...]
    handler: Callable[..., Any]
    description: str = ""
    signature: inspect.Signature | None = None

    @property
    def arity(self) -> int:
        return len(self.parameters)

    def bind(self, args: Sequence[Any]) -> dict[str, Any]:
        """Match positional arguments to parameter names.

        Raises:
            ArityMismatchError: If the argument count differs from the
                declared parameter count.
        """
        if len(args) != self.arity:
            raise ArityMismatchError(self.name, self.arity, len(args))
        return dict(zip(self.parameters, args))

    async def invoke(self, args: Sequence[Any]) -> Any:
        """Call the handler with bound arguments and await the result if needed."""
        bound = self.bind(args)
        result = self.handler(*bound.values())
        if inspect.isawaitable(result):
            result = await result
        return result

    def describe(self) -> str:
        """Render a TypeScript-like declaration of this function."""
        params = []
        for name in self.parameters:
            annotation = None
            if self.signature is not None:
                annotation = self.signature.parameters[name].annotation
            params.append(f"{name}: {_type_name(annotation)}")
        returns = None if self.signature is None else self.signature.return_annotation
        line = f"{self.name}({', '.join(params)}): {_type_name(returns)};"
        if self.description:
            return f"// {self.description}\n{line}"
        return line


class Api:
    """Registry of functions callable from programs.

    Usage::

        api = Api("MathApi")
        api.register(add)
        api.register(lambda x: -x, name="negate")
        definition = api.resolve("add")
    """

    def __init__(self, name: str = "API") -> None:
        if not name:
            raise ValueError("Api name must be non-empty")
        self.name = name
        self._functions: dict[str, FunctionDefinition] = {}

    @classmethod
    def from_object(cls, obj: object, name: str | None = None) -> Api:
        """Register every public method of ``obj``."""
        api = cls(name or type(obj).__name__)
        for attr in dir(obj):
            if attr.startswith("_"):
                continue
            member = getattr(obj, attr)
            if callable(member) and not inspect.isclass(member):
                api.register(member, name=attr)
        return api

    def register(
        self,
        handler: Callable[..., Any],
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> FunctionDefinition:
        """Register a callable under ``name`` (defaults to its ``__name__``).

        Raises:
            ValueError: If the name is taken, or the callable has no usable
                name or takes keyword-only/variadic parameters.
        """
        func_name = name or getattr(handler, "__name__", None)
        if not func_name or func_name == "<lambda>":
            raise ValueError("A name is required to register this callable")
        if func_name in self._functions:
            raise ValueError(
                f"Function '{func_name}' is already registered. "
                f"Unregister it first to re-register."
            )

        signature = inspect.signature(handler)
        parameters: list[str] = []
        for param in signature.parameters.values():
            if param.kind not in _POSITIONAL_KINDS:
                raise ValueError(
                    f"Function '{func_name}' has unsupported parameter "
                    f"'{param.name}' ({param.kind.description}); only positional "
                    f"parameters can be bound by programs"
                )
            parameters.append(param.name)

        if description is None:
            doc = inspect.getdoc(handler) or ""
            description = doc.strip().splitlines()[0] if doc.strip() else ""

        definition = FunctionDefinition(
            name=func_name,
            parameters=tuple(parameters),
            handler=handler,
            description=description,
            signature=signature,
        )
        self._functions[func_name] = definition
        logger.debug("Registered function %s(%s)", func_name, ", ".join(parameters))
        return definition

    def unregister(self, name: str) -> None:
        self._functions.pop(name, None)

    def resolve(self, name: str) -> FunctionDefinition | None:
        """Return the definition for ``name``, or None."""
        return self._functions.get(name)

    def require(self, name: str) -> FunctionDefinition:
        """Return the definition for ``name``.

        Raises:
            FunctionNotFoundError: If nothing is registered under ``name``.
        """
        definition = self._functions.get(name)
        if definition is None:
            raise FunctionNotFoundError(name)
        return definition

    async def invoke(self, name: str, args: Sequence[Any]) -> Any:
        """Resolve ``name`` and invoke it with ``args``."""
        return await self.require(name).invoke(args)

    def describe(self) -> str:
        """Render the registry as a TypeScript-like interface."""
        lines = [f"interface {self.name} {{"]
        for definition in self._functions.values():
            for line in definition.describe().splitlines():
                lines.append(f"  {line}")
        lines.append("}")
        return "\n".join(lines)

    @property
    def function_names(self) -> list[str]:
        return list(self._functions.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[FunctionDefinition]:
        return iter(self._functions.values())

    def __len__(self) -> int:
        return len(self._functions)


def _type_name(annotation: Any) -> str:
    if annotation is None or annotation is inspect.Parameter.empty:
        return "any"
    if isinstance(annotation, str):
        return _STRING_TYPE_NAMES.get(annotation, "any")
    return _TYPE_NAMES.get(annotation, "any")


# Annotations arrive as strings under ``from __future__ import annotations``.
_STRING_TYPE_NAMES = {
    "str": "string",
    "int": "number",
    "float": "number",
    "bool": "boolean",
    "list": "any[]",
    "dict": "object",
    "None": "void",
}
