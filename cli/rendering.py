"""Console rendering for the sheet bridge CLI."""

from __future__ import annotations

from typing import List, Tuple

import typer

from bridge.ingest.models import PriceSummary
from bridge.pipeline.status import Severity, StatusSink


def _fmt(value: object) -> str:
    if value is None or value == "":
        return "—"
    return str(value)


def render_summary(summary: PriceSummary) -> str:
    """Render the price summary as an aligned block of text."""
    lines = [
        f"  Lowest  : {_fmt(summary.lowest_price)}",
        f"  Average : {_fmt(summary.average_price)}",
        f"  Highest : {_fmt(summary.highest_price)}",
    ]
    if summary.trend not in (None, ""):
        lines.append("")
        lines.append(f"  Trend   : {summary.trend}")
    return "\n".join(lines)


def render_sheets(rows: List[Tuple[str, int, bool]]) -> str:
    """Render ``(name, used_rows, is_active)`` tuples, one sheet per line."""
    width = max((len(name) for name, _, _ in rows), default=0)
    return "\n".join(
        f"{'*' if active else ' '} {name.ljust(width)}  {used} row(s)"
        for name, used, active in rows
    )


class ConsoleStatusSink(StatusSink):
    """Prints status lines: green for progress, red for failures."""

    def set_status(self, message: str, severity: Severity = Severity.NORMAL) -> None:
        colour = typer.colors.RED if severity is Severity.ERROR else typer.colors.GREEN
        typer.secho(message, fg=colour)

    def show_summary(self, summary: PriceSummary) -> None:
        typer.echo(render_summary(summary))
