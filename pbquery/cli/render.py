from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, cast

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .results import CommandResult


@dataclass(frozen=True, slots=True)
class RenderSettings:
    quiet: bool
    verbosity: int


def _error_title(error_type: str) -> str:
    mapping = {
        "usage_error": "Usage error",
        "io_error": "I/O error",
        "internal_error": "Internal error",
    }
    return mapping.get((error_type or "").strip(), "Error")


def _render_rows(stdout: Console, rows: list[dict[str, Any]]) -> None:
    columns = list(rows[0].keys())
    table = Table(show_header=True, header_style="bold")
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*[Text(str(row.get(col, ""))) for col in columns])
    stdout.print(table)


def render_result(result: CommandResult, *, settings: RenderSettings) -> None:
    stdout = Console(file=sys.stdout, force_terminal=False, soft_wrap=True)
    stderr = Console(file=sys.stderr, force_terminal=False, soft_wrap=True)

    if not result.ok:
        error = result.error
        if error is None:
            stderr.print("Error")
            return
        stderr.print(f"{_error_title(error.type)}: {error.message}", markup=False)
        if settings.quiet:
            return
        if error.hint:
            stderr.print(f"Hint: {error.hint}", markup=False)
        elif error.type == "usage_error":
            stderr.print(f"Hint: run `pbquery {result.command} --help`", markup=False)
        if error.details and settings.verbosity >= 1:
            stderr.print(error.details)
        return

    data = result.data
    if isinstance(data, list) and data and all(isinstance(row, dict) for row in data):
        _render_rows(stdout, cast(list[dict[str, Any]], data))
        return
    if isinstance(data, dict):
        table = Table(show_header=False, box=None)
        table.add_column("key", style="bold")
        table.add_column("value")
        for key, value in data.items():
            table.add_row(str(key), Text(str(value)))
        stdout.print(table)
        return
    if data is not None:
        stdout.print(str(data), markup=False, highlight=False)
