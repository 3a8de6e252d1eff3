"""typeloom translate -- turn a request into a typed JSON value."""

from __future__ import annotations

import asyncio

import click

from typeloom.cli.formatting import format_error, format_value, get_console


@click.command()
@click.argument("request")
@click.option(
    "--target",
    "-t",
    required=True,
    help="Pydantic model (or other type) to translate into, as 'module:Name'.",
)
@click.option(
    "--max-repairs",
    default=1,
    show_default=True,
    type=click.IntRange(min=0),
    help="Maximum number of repair rounds.",
)
@click.option("--temperature", default=None, type=float, help="Sampling temperature.")
@click.pass_context
def translate(
    ctx: click.Context,
    request: str,
    target: str,
    max_repairs: int,
    temperature: float | None,
) -> None:
    """Translate REQUEST into a value of the TARGET type and print it as JSON."""
    from typeloom.cli import _load_object, _model_session
    from typeloom.config import TranslationSettings
    from typeloom.translator import JsonTranslator
    from typeloom.validation import PydanticValidator

    console = get_console()
    repairs: list[str] = []

    async def _translate():
        async with _model_session(ctx) as model:
            translator = JsonTranslator(
                model,
                PydanticValidator(_load_object(target)),
                settings=TranslationSettings(temperature=temperature),
                max_repair_attempts=max_repairs,
            )
            translator.on_attempting_repair.append(repairs.append)
            return await translator.translate(request)

    try:
        value = asyncio.run(_translate())
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    format_value(value, console)
    if repairs:
        console.print(f"[dim]{len(repairs)} repair attempt(s)[/dim]")
