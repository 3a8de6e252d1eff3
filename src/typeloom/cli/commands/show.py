"""typeloom show -- print a JSON program as pseudo-code."""

from __future__ import annotations

import click

from typeloom.cli.formatting import format_error, format_program, get_console


@click.command()
@click.argument("program_file", type=click.File("r"))
def show(program_file) -> None:
    """Print the program in PROGRAM_FILE as one line per step."""
    from typeloom.program.parser import parse_program
    from typeloom.program.writer import write_program

    console = get_console()
    try:
        program = parse_program(program_file.read())
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    format_program(write_program(program), console)
