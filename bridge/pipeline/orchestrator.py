"""Request → poll → extract → write pipeline.

``Orchestrator.run`` drives one search end to end and reports every phase
to the injected :class:`~bridge.pipeline.status.StatusSink`.  Status
messages are strictly ordered::

    "Searching..."
    "Data sent successfully. Response ID: <id>"      (or a send failure)
    "Data still processing. Will check again later."  (zero or more)
    one terminal notice                                 (success or error)

Every :class:`~bridge.errors.BridgeError` is terminal for the run: it is
reported once and returned on the :class:`PipelineResult`; nothing is
retried.  Runs are not serialised; calling ``run`` while another run is
polling starts a second, independent loop.  Each run commits only the
workbook writes it queued itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from bridge.errors import BridgeError, PollTimeout
from bridge.ingest.extractor import extract_summary, extract_table
from bridge.ingest.models import PriceSummary, Table
from bridge.jobs.client import JobClient
from bridge.jobs.models import (
    Destination,
    JobHandle,
    JobRequest,
    JobState,
    JobStatus,
    PollState,
)
from bridge.jobs.poller import CancellationToken, Poller
from bridge.pipeline.status import Severity, StatusSink
from bridge.sheets.writer import SheetWriter

MSG_SEARCHING = "Searching..."
MSG_PROCESSING = "Data still processing. Will check again later."
MSG_CANCELLED = "Polling cancelled."


@dataclass
class PipelineResult:
    """Typed outcome of one pipeline run."""

    state: PollState
    handle: Optional[JobHandle] = None
    summary: Optional[PriceSummary] = None
    table: Optional[Table] = None
    sheet_name: Optional[str] = None
    error: Optional[BridgeError] = None

    @property
    def ok(self) -> bool:
        return self.state is PollState.READY and self.error is None


class Orchestrator:
    def __init__(
        self,
        client: JobClient,
        poller: Poller,
        writer: SheetWriter,
        sink: StatusSink,
    ) -> None:
        self._client = client
        self._poller = poller
        self._writer = writer
        self._sink = sink
        self._token: Optional[CancellationToken] = None

    def cancel(self) -> None:
        """Cancel the poll loop of the most recent run, if still active."""
        if self._token is not None:
            self._token.cancel()

    async def run(
        self,
        request: JobRequest,
        on_submitted: Optional[Callable[[JobHandle], None]] = None,
    ) -> PipelineResult:
        """Submit *request*, wait for the job and write its table.

        *on_submitted* is called with the handle as soon as the backend has
        accepted the job, before polling starts.
        """
        self._sink.set_status(MSG_SEARCHING)
        try:
            handle = await self._client.submit(request)
        except BridgeError as exc:
            self._sink.set_status(f"Failed to send data: {exc}", Severity.ERROR)
            return PipelineResult(state=PollState.FAILED, error=exc)

        self._sink.set_status(f"Data sent successfully. Response ID: {handle.job_id}")
        if on_submitted is not None:
            on_submitted(handle)
        return await self.resume(handle, request.destination)

    async def resume(self, handle: JobHandle, destination: Destination) -> PipelineResult:
        """Poll an already submitted job and write its table."""

        def on_status(status: JobStatus) -> None:
            if status.state is JobState.PROCESSING:
                self._sink.set_status(MSG_PROCESSING)

        token = self._poller.poll(handle, on_status)
        self._token = token
        state = await token.wait()
        result = PipelineResult(state=state, handle=handle)

        if state is PollState.CANCELLED:
            self._sink.set_status(MSG_CANCELLED, Severity.ERROR)
            return result

        terminal = token.terminal
        if terminal is None or terminal.state is not JobState.READY:
            cause = terminal.cause if terminal is not None else None
            if not isinstance(cause, BridgeError):
                cause = BridgeError("poll loop ended without a result")
            result.error = cause
            if isinstance(cause, PollTimeout):
                self._sink.set_status(f"Gave up polling backend: {cause}", Severity.ERROR)
            else:
                self._sink.set_status(f"Error polling backend: {cause}", Severity.ERROR)
            return result

        try:
            result.table = extract_table(terminal.payload)
        except BridgeError as exc:
            result.state = PollState.FAILED
            result.error = exc
            self._sink.set_status(f"Unexpected payload: {exc}", Severity.ERROR)
            return result

        # The summary is display-only; a bad one never blocks the table.
        try:
            result.summary = extract_summary(terminal.payload)
        except BridgeError as exc:
            print(f"[PIPELINE] Summary skipped: {exc}")
        else:
            self._sink.show_summary(result.summary)

        try:
            result.sheet_name = await self._writer.write(result.table, destination)
        except BridgeError as exc:
            result.state = PollState.FAILED
            result.error = exc
            self._sink.set_status(f"Failed to write to the workbook: {exc}", Severity.ERROR)
            return result

        self._sink.set_status(
            f"Processing complete. {len(result.table.rows)} row(s) written "
            f"to '{result.sheet_name}'."
        )
        return result
