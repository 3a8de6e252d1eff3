"""typeloom CLI -- translate requests and run JSON programs from a terminal.

This module is NEVER imported from typeloom/__init__.py.
It is only loaded via the ``typeloom`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import importlib
import inspect
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install typeloom[cli]"
    ) from None

from typeloom.cli.formatting import get_console

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from typeloom.llm.protocols import LanguageModel


@click.group()
@click.option(
    "--model",
    "model_name",
    default=None,
    envvar="TYPELOOM_MODEL",
    help="Model name sent to the completions API.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log translation attempts to stderr.")
@click.pass_context
def cli(ctx: click.Context, model_name: str | None, verbose: bool) -> None:
    """typeloom: typed values and executable plans from natural language."""
    ctx.ensure_object(dict)
    ctx.obj.setdefault("model_name", model_name)
    if verbose:
        from rich.logging import RichHandler

        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=get_console(stderr=True), show_path=False)],
        )


@asynccontextmanager
async def _model_session(ctx: click.Context) -> AsyncIterator[LanguageModel]:
    """Yield the language model for a command.

    Tests (and embedding applications) may inject a ready model via
    ``obj={"model": ...}``; otherwise an OpenAIModel is built from the
    environment and closed on exit.
    """
    injected = ctx.obj.get("model")
    if injected is not None:
        yield injected
        return

    from typeloom.llm.client import OpenAIModel

    model = OpenAIModel.from_env(model=ctx.obj.get("model_name"))
    try:
        yield model
    finally:
        await model.aclose()


def _load_object(reference: str) -> Any:
    """Import ``package.module:attribute`` and return the attribute."""
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise click.BadParameter(
            f"Expected 'module:attribute', got {reference!r}"
        )
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(f"Cannot import module {module_name!r}: {exc}") from exc
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise click.BadParameter(
                f"Module {module_name!r} has no attribute {attr_path!r}"
            ) from None
    return obj


def _load_api(reference: str):
    """Load an Api from ``module:name``.

    The target may be an Api, a zero-argument factory returning one (or any
    object), a class to instantiate, a plain function (exposed alone), or an
    object whose public methods become the Api.
    """
    from typeloom.program.api import Api

    target = _load_object(reference)
    if isinstance(target, Api):
        return target
    if isinstance(target, type):
        return Api.from_object(target())
    if callable(target):
        if _takes_no_arguments(target):
            produced = target()
            return produced if isinstance(produced, Api) else Api.from_object(produced)
        api = Api(reference.partition(":")[0].rsplit(".", 1)[-1])
        try:
            api.register(target)
        except ValueError as exc:
            raise click.BadParameter(str(exc)) from exc
        return api
    return Api.from_object(target)


def _takes_no_arguments(func: Any) -> bool:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return False
    return all(
        param.default is not inspect.Parameter.empty
        or param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for param in signature.parameters.values()
    )


# Register subcommands after cli group is defined
from typeloom.cli.commands.translate import translate  # noqa: E402
from typeloom.cli.commands.plan import plan  # noqa: E402
from typeloom.cli.commands.run import run  # noqa: E402
from typeloom.cli.commands.show import show  # noqa: E402

cli.add_command(translate)
cli.add_command(plan)
cli.add_command(run)
cli.add_command(show)
