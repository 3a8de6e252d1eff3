"""typeloom plan -- translate a request into a program and optionally run it."""

from __future__ import annotations

import asyncio
import json

import click

from typeloom.cli.formatting import (
    format_error,
    format_program,
    format_step_results,
    get_console,
)


@click.command()
@click.argument("request")
@click.option("--api", "api_ref", required=True, help="Api or object exposing functions, as 'module:name'.")
@click.option("--run", "run_program", is_flag=True, help="Evaluate the program after translating it.")
@click.option("--json", "as_json", is_flag=True, help="Print the program as JSON instead of pseudo-code.")
@click.option(
    "--max-repairs",
    default=1,
    show_default=True,
    type=click.IntRange(min=0),
    help="Maximum number of repair rounds.",
)
@click.pass_context
def plan(
    ctx: click.Context,
    request: str,
    api_ref: str,
    run_program: bool,
    as_json: bool,
    max_repairs: int,
) -> None:
    """Translate REQUEST into a program over the functions of --api."""
    from typeloom.cli import _load_api, _model_session
    from typeloom.program.evaluator import Evaluator
    from typeloom.program.parser import program_to_json
    from typeloom.program.translator import ProgramTranslator
    from typeloom.program.writer import write_program

    console = get_console()

    async def _plan():
        api = _load_api(api_ref)
        async with _model_session(ctx) as model:
            translator = ProgramTranslator(model, api, max_repair_attempts=max_repairs)
            program = await translator.translate(request)
        outcome = await Evaluator(api).run(program) if run_program else None
        return program, outcome

    try:
        program, outcome = asyncio.run(_plan())
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    if as_json:
        console.print_json(json.dumps(program_to_json(program)))
    else:
        format_program(write_program(program), console)
    if outcome is not None:
        format_step_results([call.name for call in program.calls], outcome.results, console)
