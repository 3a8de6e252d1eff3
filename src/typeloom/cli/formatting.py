"""Rich formatting helpers for the typeloom CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table


def get_console(*, stderr: bool = False) -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=stderr)


def to_jsonable(value: Any) -> Any:
    """Convert pydantic models (and containers of them) to plain JSON data."""
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


def format_value(value: Any, console: Console) -> None:
    """Print a translated value as indented JSON."""
    console.print_json(json.dumps(to_jsonable(value), default=str))


def format_program(text: str, console: Console) -> None:
    """Print program pseudo-code."""
    if not text:
        console.print("[dim]Empty program.[/dim]")
        return
    console.print(escape(text))


def format_step_results(calls: Sequence[str], results: Sequence[Any], console: Console) -> None:
    """Display step results in a compact table."""
    if not results:
        console.print("[dim]No steps.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Step", style="yellow", justify="right")
    table.add_column("Function", style="cyan")
    table.add_column("Result")

    for index, (name, result) in enumerate(zip(calls, results)):
        rendered = json.dumps(to_jsonable(result), default=str)
        table.add_row(str(index), name, escape(rendered))

    console.print(table)


def format_error(message: str, console: Console) -> None:
    """Print an error message in red."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
