"""Jobs package: submit a search to the proxy and poll it to completion."""

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

__all__ = [
    "JobClient",
    "Poller",
    "CancellationToken",
    "Destination",
    "JobHandle",
    "JobRequest",
    "JobState",
    "JobStatus",
    "PollState",
]
