"""HTTP client for the job proxy: submit a search, query its status."""

from __future__ import annotations

from typing import Any

import httpx

from bridge.config import settings
from bridge.errors import BackendRejected, MalformedPayload, NetworkError
from bridge.jobs.models import JobHandle, JobRequest, JobStatus

_JSON_HEADERS = {"Content-Type": "application/json"}


class JobClient:
    """Talks to ``POST /proxy`` and ``GET /reply`` on the job proxy.

    A short-lived :class:`httpx.AsyncClient` is opened per call.  Nothing is
    retried here: every failure is raised as a
    :class:`~bridge.errors.BridgeError` subclass for the caller to report.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        verify: bool | None = None,
    ) -> None:
        self._base_url = (base_url or settings.proxy_base_url).rstrip("/")
        self._timeout = settings.request_timeout if timeout is None else timeout
        self._verify = settings.verify_tls if verify is None else verify

    @property
    def base_url(self) -> str:
        return self._base_url

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=_JSON_HEADERS,
            timeout=self._timeout,
            verify=self._verify,
        )

    async def submit(self, request: JobRequest) -> JobHandle:
        """Submit *request* and return the backend's job handle.

        Raises:
            NetworkError: The POST did not complete, or its body could not
                be read.
            BackendRejected: Non-2xx status, or a 2xx without a usable
                ``responseId``.
        """
        url = f"{self._base_url}/proxy"
        print(f"[SUBMIT] Sending {request.target_url!r} (tags={request.keywords!r}) …")
        try:
            async with self._client() as client:
                response = await client.post(url, json=request.to_payload())
        except httpx.HTTPError as exc:
            raise NetworkError(f"request to {url} failed: {exc}") from exc

        if not response.is_success:
            raise BackendRejected(
                f"submission rejected with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise BackendRejected(
                "submission response is not JSON", status_code=response.status_code
            ) from exc

        job_id = body.get("responseId") if isinstance(body, dict) else None
        if not job_id:
            raise BackendRejected(
                "submission response carries no responseId",
                status_code=response.status_code,
            )

        print(f"[SUBMIT] ✓ responseId={job_id}")
        return JobHandle(job_id=str(job_id))

    async def fetch_status(self, handle: JobHandle) -> JobStatus:
        """Query the job once.

        Returns ``PROCESSING`` while the backend reports
        ``{"status": "processing"}``; any other JSON body is the finished
        envelope and is returned as ``READY``.

        Raises:
            NetworkError: The GET did not complete, or its body could not
                be read.
            BackendRejected: Non-2xx status.
            MalformedPayload: The body is not valid JSON.
        """
        url = f"{self._base_url}/reply"
        try:
            async with self._client() as client:
                response = await client.get(url, params={"responseId": handle.job_id})
        except httpx.HTTPError as exc:
            raise NetworkError(f"request to {url} failed: {exc}") from exc

        if not response.is_success:
            raise BackendRejected(
                f"status query rejected with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body: Any = response.json()
        except ValueError as exc:
            raise MalformedPayload("status response is not JSON") from exc

        if isinstance(body, dict) and body.get("status") == "processing":
            return JobStatus.processing()
        return JobStatus.ready(body)
