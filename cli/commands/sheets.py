"""Sheet inspection commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from bridge.errors import BridgeError
from bridge.sheets.document import OpenpyxlDocument
from cli.context import load_context, resolve_workbook
from cli.rendering import render_sheets

sheets_app = typer.Typer(help="Inspect the output workbook.")


@sheets_app.command("list")
def sheets_list(
    workbook: Optional[Path] = typer.Option(None, "--workbook", help="Workbook file (.xlsx)."),
) -> None:
    """List the sheets of the workbook with their used row counts."""
    path = resolve_workbook(workbook, load_context())
    if not path.exists():
        typer.echo(f"Workbook {str(path)!r} does not exist yet.")
        return

    try:
        document = OpenpyxlDocument(path)
        active = document.active_sheet()
        rows = [
            (name, document.used_row_count(name), name == active)
            for name in document.sheet_names()
        ]
    except BridgeError as exc:
        typer.secho(f"❌ {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(f"Sheets in {str(path)!r}:")
    typer.echo(render_sheets(rows))
