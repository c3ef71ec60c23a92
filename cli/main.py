"""Sheet bridge CLI: entry-point for running searches into a workbook.

Usage:
    sheetbridge --help

Commands:
    search   → submit a search, poll it, write the result
    resume   → poll an already submitted job and write its result
    status   → query a job once
    sheets   → inspect the output workbook
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Coroutine, Optional

import typer

from bridge.config import settings
from bridge.errors import BridgeError
from bridge.jobs.client import JobClient
from bridge.jobs.models import Destination, JobHandle, JobRequest, JobState
from bridge.jobs.poller import Poller
from bridge.pipeline.orchestrator import Orchestrator, PipelineResult
from bridge.sheets.document import OpenpyxlDocument
from bridge.sheets.writer import SheetWriter
from cli.commands.sheets import sheets_app
from cli.context import (
    load_context,
    remember_response,
    remember_target,
    resolve_destination,
    resolve_workbook,
)
from cli.rendering import ConsoleStatusSink

app = typer.Typer(
    name="sheetbridge",
    help="Fetch search results from the job proxy into an .xlsx workbook.",
    no_args_is_help=True,
)
app.add_typer(sheets_app, name="sheets")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _build_orchestrator(
    workbook: Path,
    interval: Optional[float],
    max_attempts: Optional[int],
) -> Orchestrator:
    client = JobClient()
    poller = Poller(client, interval=interval, max_attempts=max_attempts)
    writer = SheetWriter(OpenpyxlDocument(workbook))
    return Orchestrator(client, poller, writer, ConsoleStatusSink())


def _finish(result: PipelineResult) -> None:
    if not result.ok:
        raise typer.Exit(code=1)


def _run(
    orchestrator: Orchestrator, coro: Coroutine[Any, Any, PipelineResult]
) -> PipelineResult:
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        orchestrator.cancel()
        typer.secho(
            "Interrupted. Resume the job with: sheetbridge resume",
            fg=typer.colors.YELLOW,
        )
        raise typer.Exit(code=130)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command("search")
def search(
    site: str = typer.Option(..., "--site", help="Website URL to search."),
    tags: str = typer.Option(..., "--tags", help="Search keywords."),
    workbook: Optional[Path] = typer.Option(None, "--workbook", help="Workbook file (.xlsx)."),
    destination: Optional[Destination] = typer.Option(
        None, "--destination", case_sensitive=False,
        help="Write to a new sheet or append to the active one.",
    ),
    interval: Optional[float] = typer.Option(None, "--interval", help="Seconds between polls."),
    max_attempts: Optional[int] = typer.Option(
        None, "--max-attempts", help="Give up after N polls (0 = never)."
    ),
) -> None:
    """Submit a search, wait for the backend and write the result table."""
    if not site.strip():
        raise typer.BadParameter("must not be empty", param_hint="--site")

    ctx = load_context()
    path = resolve_workbook(workbook, ctx)
    dest = resolve_destination(destination, ctx)

    try:
        orchestrator = _build_orchestrator(path, interval, max_attempts)
    except BridgeError as exc:
        typer.secho(f"❌ {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    remember_target(ctx, path, dest)

    def on_submitted(handle: JobHandle) -> None:
        remember_response(ctx, handle.job_id)

    request = JobRequest(target_url=site.strip(), keywords=tags, destination=dest)
    _finish(_run(orchestrator, orchestrator.run(request, on_submitted=on_submitted)))


@app.command("resume")
def resume(
    response_id: Optional[str] = typer.Option(
        None, "--id", help="Response ID to resume (defaults to the last submitted job)."
    ),
    workbook: Optional[Path] = typer.Option(None, "--workbook", help="Workbook file (.xlsx)."),
    destination: Optional[Destination] = typer.Option(
        None, "--destination", case_sensitive=False,
        help="Write to a new sheet or append to the active one.",
    ),
    interval: Optional[float] = typer.Option(None, "--interval", help="Seconds between polls."),
    max_attempts: Optional[int] = typer.Option(
        None, "--max-attempts", help="Give up after N polls (0 = never)."
    ),
) -> None:
    """Poll an already submitted job and write its result table."""
    ctx = load_context()
    job_id = response_id or ctx.last_response_id
    if not job_id:
        typer.echo("❌ No response ID given and no previous search on record.")
        raise typer.Exit(code=1)

    path = resolve_workbook(workbook, ctx)
    dest = resolve_destination(destination, ctx)

    try:
        orchestrator = _build_orchestrator(path, interval, max_attempts)
    except BridgeError as exc:
        typer.secho(f"❌ {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    remember_target(ctx, path, dest)

    typer.echo(f"[resume] Polling responseId {job_id} …")
    _finish(_run(orchestrator, orchestrator.resume(JobHandle(job_id=job_id), dest)))


@app.command("status")
def status(
    response_id: Optional[str] = typer.Option(
        None, "--id", help="Response ID to query (defaults to the last submitted job)."
    ),
) -> None:
    """Query a job once and print whether it is still processing."""
    job_id = response_id or load_context().last_response_id
    if not job_id:
        typer.echo("❌ No response ID given and no previous search on record.")
        raise typer.Exit(code=1)

    try:
        result = asyncio.run(JobClient().fetch_status(JobHandle(job_id=job_id)))
    except BridgeError as exc:
        typer.secho(f"❌ {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if result.state is JobState.PROCESSING:
        typer.echo(f"[status] {job_id}: processing")
    else:
        count = len(result.payload) if isinstance(result.payload, list) else 1
        typer.echo(f"[status] {job_id}: ready ({count} record(s)) at {settings.proxy_base_url}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
