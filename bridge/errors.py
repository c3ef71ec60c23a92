"""Error taxonomy for the request/poll/ingest pipeline.

Every failure the pipeline can report is a :class:`BridgeError`.  Library
code raises the specific subclass (chaining the underlying httpx, pydantic
or openpyxl exception); the orchestrator is the single place that turns
them into status messages.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for all pipeline failures."""


class NetworkError(BridgeError):
    """The transport call did not complete (connection, TLS, timeout)."""


class BackendRejected(BridgeError):
    """The backend answered with a non-success status or an unusable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedPayload(BridgeError):
    """The backend payload does not have the expected envelope shape."""


class WriteError(BridgeError):
    """The workbook document rejected a write or failed to commit."""


class PollTimeout(BridgeError):
    """The poll loop gave up after its configured number of attempts."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"job still processing after {attempts} poll attempt(s)")
        self.attempts = attempts
