"""typeloom run -- evaluate a JSON program file against an Api."""

from __future__ import annotations

import asyncio

import click

from typeloom.cli.formatting import format_error, format_step_results, get_console


@click.command()
@click.argument("program_file", type=click.File("r"))
@click.option("--api", "api_ref", required=True, help="Api or object exposing functions, as 'module:name'.")
@click.pass_context
def run(ctx: click.Context, program_file, api_ref: str) -> None:
    """Evaluate the program in PROGRAM_FILE and print each step's result."""
    from typeloom.cli import _load_api
    from typeloom.program.evaluator import Evaluator
    from typeloom.program.parser import parse_program

    console = get_console()
    try:
        program = parse_program(program_file.read())
        api = _load_api(api_ref)
        outcome = asyncio.run(Evaluator(api).run(program))
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    format_step_results([call.name for call in program.calls], outcome.results, console)
