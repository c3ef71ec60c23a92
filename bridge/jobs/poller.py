"""Fixed-interval status polling for a submitted job.

``Poller.poll`` schedules the loop as an asyncio task and hands back a
:class:`CancellationToken`.  The first query goes out immediately; later
queries follow every ``interval`` seconds until the job is ready, a query
fails, the optional attempt ceiling is hit, or the token is cancelled.

Loop states::

    SUBMITTED → POLLING → READY | FAILED | TIMED_OUT | CANCELLED

At most one terminal ``JobStatus`` (READY or FAILED) is emitted per loop;
``PROCESSING`` may be emitted any number of times.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol

from bridge.config import settings
from bridge.errors import BridgeError, PollTimeout
from bridge.jobs.models import JobHandle, JobState, JobStatus, PollState

StatusCallback = Callable[[JobStatus], None]


class StatusSource(Protocol):
    async def fetch_status(self, handle: JobHandle) -> JobStatus: ...


class CancellationToken:
    """Handle on one running poll loop."""

    def __init__(self, handle: JobHandle) -> None:
        self.handle = handle
        self.state = PollState.SUBMITTED
        self.attempts = 0
        self.terminal: Optional[JobStatus] = None
        self._cancelled = asyncio.Event()
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop issuing new ticks.

        A request already in flight is allowed to finish, but its response
        is discarded.  Cancelling a finished loop is a no-op.
        """
        if self.state.is_final:
            return
        self._cancelled.set()
        self.state = PollState.CANCELLED

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def wait(self) -> PollState:
        """Wait for the loop to stop and return its final state."""
        if self._task is not None:
            await self._task
        return self.state

    async def _sleep(self, seconds: float) -> bool:
        """Sleep up to *seconds*; return ``True`` if cancelled meanwhile."""
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True


class Poller:
    """Polls a :class:`~bridge.jobs.client.JobClient` until a job resolves.

    Args:
        client: Anything with an async ``fetch_status(handle)``.
        interval: Seconds between ticks (default ``settings.poll_interval``).
        max_attempts: Give up after this many ticks; ``0`` never gives up.
        backoff: Multiplier applied to the interval after each processing
            tick.  ``1.0`` keeps a fixed interval.
        max_interval: Upper bound for the backed-off interval.
    """

    def __init__(
        self,
        client: StatusSource,
        *,
        interval: float | None = None,
        max_attempts: int | None = None,
        backoff: float | None = None,
        max_interval: float | None = None,
    ) -> None:
        self._client = client
        self._interval = settings.poll_interval if interval is None else interval
        self._max_attempts = (
            settings.poll_max_attempts if max_attempts is None else max_attempts
        )
        self._backoff = settings.poll_backoff if backoff is None else backoff
        self._max_interval = (
            settings.poll_max_interval if max_interval is None else max_interval
        )

    def poll(
        self,
        handle: JobHandle,
        on_status: StatusCallback,
        interval: float | None = None,
    ) -> CancellationToken:
        """Start polling *handle*; must be called with a running event loop."""
        token = CancellationToken(handle)
        delay = self._interval if interval is None else interval
        token._task = asyncio.get_running_loop().create_task(
            self._run(token, on_status, delay)
        )
        return token

    async def _run(
        self,
        token: CancellationToken,
        on_status: StatusCallback,
        delay: float,
    ) -> None:
        handle = token.handle
        if token.cancelled:
            return
        token.state = PollState.POLLING
        ceiling = max(self._max_interval, delay)

        while not token.cancelled:
            token.attempts += 1
            print(f"[POLL] Polling backend for responseId: {handle.job_id} (tick {token.attempts})")
            try:
                status = await self._client.fetch_status(handle)
            except BridgeError as exc:
                if token.cancelled:
                    return
                print(f"[POLL] ✗ {exc}")
                self._finish(token, on_status, PollState.FAILED, JobStatus.failed(exc))
                return

            if token.cancelled:
                return

            if status.state is not JobState.PROCESSING:
                print(f"[POLL] ✓ {handle.job_id} resolved after {token.attempts} tick(s).")
                final = PollState.READY if status.state is JobState.READY else PollState.FAILED
                self._finish(token, on_status, final, status)
                return

            print("[POLL] Data still processing. Will check again later.")
            on_status(status)

            if self._max_attempts and token.attempts >= self._max_attempts:
                print(f"[POLL] ✗ giving up after {token.attempts} tick(s).")
                self._finish(
                    token,
                    on_status,
                    PollState.TIMED_OUT,
                    JobStatus.failed(PollTimeout(token.attempts)),
                )
                return

            if await token._sleep(delay):
                return
            delay = min(delay * self._backoff, ceiling)

    @staticmethod
    def _finish(
        token: CancellationToken,
        on_status: StatusCallback,
        state: PollState,
        status: JobStatus,
    ) -> None:
        token.state = state
        token.terminal = status
        on_status(status)
