"""Data models for submitting and tracking backend jobs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Destination(str, Enum):
    """Where the fetched table is written."""

    NEW_SHEET = "new"
    ACTIVE_SHEET = "active"


class JobState(str, Enum):
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class PollState(str, Enum):
    """Lifecycle of a single poll loop."""

    SUBMITTED = "submitted"
    POLLING = "polling"
    READY = "ready"
    FAILED = "failed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"

    @property
    def is_final(self) -> bool:
        return self not in (PollState.SUBMITTED, PollState.POLLING)


@dataclass(frozen=True)
class JobRequest:
    """A search to run on the backend."""

    target_url: str
    keywords: str
    destination: Destination = Destination.NEW_SHEET

    def to_payload(self) -> dict[str, str]:
        """Body of the ``POST /proxy`` call."""
        return {"siteUrl": self.target_url, "tags": self.keywords}


@dataclass(frozen=True)
class JobHandle:
    """Opaque backend identifier returned by a successful submission."""

    job_id: str


@dataclass(frozen=True)
class JobStatus:
    """Outcome of one poll tick.

    Exactly one of the three shapes is used:

    - ``PROCESSING``: no payload, no cause.
    - ``READY``: ``payload`` holds the raw envelope.
    - ``FAILED``: ``cause`` holds the :class:`~bridge.errors.BridgeError`.
    """

    state: JobState
    payload: Any = None
    cause: BaseException | None = None

    @classmethod
    def processing(cls) -> JobStatus:
        return cls(JobState.PROCESSING)

    @classmethod
    def ready(cls, payload: Any) -> JobStatus:
        return cls(JobState.READY, payload=payload)

    @classmethod
    def failed(cls, cause: BaseException) -> JobStatus:
        return cls(JobState.FAILED, cause=cause)

    @property
    def is_terminal(self) -> bool:
        return self.state is not JobState.PROCESSING
