"""Tests for the job proxy client (submit + single status query).

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so no real network calls
  are made; transport failures are simulated with ``side_effect``.
"""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from bridge.errors import BackendRejected, MalformedPayload, NetworkError
from bridge.jobs.client import JobClient
from bridge.jobs.models import Destination, JobHandle, JobRequest, JobState


# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

BASE = "https://proxy.test"

_REQUEST = JobRequest(
    target_url="https://shop.example.com",
    keywords="usb-c charger",
    destination=Destination.NEW_SHEET,
)


@pytest.fixture()
def client() -> JobClient:
    return JobClient(BASE, timeout=5.0, verify=True)


# ---------------------------------------------------------------------------
# submit
# ---------------------------------------------------------------------------

class TestSubmit:
    async def test_returns_handle_with_response_id(self, client: JobClient) -> None:
        with respx.mock:
            route = respx.post(f"{BASE}/proxy").mock(
                return_value=httpx.Response(200, json={"responseId": "job-42"})
            )
            handle = await client.submit(_REQUEST)

        assert handle == JobHandle(job_id="job-42")
        assert route.call_count == 1

    async def test_posts_site_url_and_tags(self, client: JobClient) -> None:
        with respx.mock:
            route = respx.post(f"{BASE}/proxy").mock(
                return_value=httpx.Response(200, json={"responseId": "job-42"})
            )
            await client.submit(_REQUEST)

        sent = route.calls.last.request
        assert json.loads(sent.content) == {
            "siteUrl": "https://shop.example.com",
            "tags": "usb-c charger",
        }
        assert sent.headers["content-type"] == "application/json"

    async def test_trailing_slash_in_base_url_is_ignored(self) -> None:
        with respx.mock:
            route = respx.post(f"{BASE}/proxy").mock(
                return_value=httpx.Response(200, json={"responseId": "x"})
            )
            await JobClient(f"{BASE}/").submit(_REQUEST)

        assert route.called

    async def test_non_success_status_raises_backend_rejected(self, client: JobClient) -> None:
        with respx.mock:
            respx.post(f"{BASE}/proxy").mock(return_value=httpx.Response(502))
            with pytest.raises(BackendRejected) as excinfo:
                await client.submit(_REQUEST)

        assert excinfo.value.status_code == 502

    async def test_connection_error_raises_network_error(self, client: JobClient) -> None:
        with respx.mock:
            respx.post(f"{BASE}/proxy").mock(
                side_effect=httpx.ConnectError("connection refused")
            )
            with pytest.raises(NetworkError):
                await client.submit(_REQUEST)

    async def test_timeout_raises_network_error(self, client: JobClient) -> None:
        with respx.mock:
            respx.post(f"{BASE}/proxy").mock(side_effect=httpx.ReadTimeout("slow"))
            with pytest.raises(NetworkError):
                await client.submit(_REQUEST)

    async def test_decoding_error_raises_network_error(self, client: JobClient) -> None:
        with respx.mock:
            respx.post(f"{BASE}/proxy").mock(side_effect=httpx.DecodingError("bad gzip"))
            with pytest.raises(NetworkError):
                await client.submit(_REQUEST)

    @pytest.mark.parametrize("body", [{}, {"responseId": ""}, {"responseId": None}, ["job-1"]])
    async def test_missing_response_id_is_never_an_empty_handle(
        self, client: JobClient, body: object
    ) -> None:
        with respx.mock:
            respx.post(f"{BASE}/proxy").mock(return_value=httpx.Response(200, json=body))
            with pytest.raises(BackendRejected):
                await client.submit(_REQUEST)

    async def test_non_json_body_raises_backend_rejected(self, client: JobClient) -> None:
        with respx.mock:
            respx.post(f"{BASE}/proxy").mock(return_value=httpx.Response(200, text="ok"))
            with pytest.raises(BackendRejected):
                await client.submit(_REQUEST)


# ---------------------------------------------------------------------------
# fetch_status
# ---------------------------------------------------------------------------

class TestFetchStatus:
    async def test_processing_status(self, client: JobClient) -> None:
        with respx.mock:
            route = respx.get(f"{BASE}/reply", params={"responseId": "job-42"}).mock(
                return_value=httpx.Response(200, json={"status": "processing"})
            )
            status = await client.fetch_status(JobHandle("job-42"))

        assert route.called
        assert status.state is JobState.PROCESSING
        assert status.is_terminal is False

    async def test_envelope_is_ready(self, client: JobClient) -> None:
        envelope = [{"Trend": "flat"}, {"headers": ["a"]}, {"a": 1}]
        with respx.mock:
            respx.get(f"{BASE}/reply").mock(return_value=httpx.Response(200, json=envelope))
            status = await client.fetch_status(JobHandle("job-42"))

        assert status.state is JobState.READY
        assert status.payload == envelope
        assert status.is_terminal is True

    async def test_other_status_value_is_treated_as_payload(self, client: JobClient) -> None:
        with respx.mock:
            respx.get(f"{BASE}/reply").mock(
                return_value=httpx.Response(200, json={"status": "done"})
            )
            status = await client.fetch_status(JobHandle("job-42"))

        assert status.state is JobState.READY
        assert status.payload == {"status": "done"}

    async def test_response_id_is_url_encoded(self, client: JobClient) -> None:
        with respx.mock:
            route = respx.get(f"{BASE}/reply").mock(
                return_value=httpx.Response(200, json={"status": "processing"})
            )
            await client.fetch_status(JobHandle("a b&c"))

        assert route.calls.last.request.url.params["responseId"] == "a b&c"

    async def test_http_error_raises_backend_rejected(self, client: JobClient) -> None:
        with respx.mock:
            respx.get(f"{BASE}/reply").mock(return_value=httpx.Response(500))
            with pytest.raises(BackendRejected) as excinfo:
                await client.fetch_status(JobHandle("job-42"))

        assert excinfo.value.status_code == 500

    async def test_transport_error_raises_network_error(self, client: JobClient) -> None:
        with respx.mock:
            respx.get(f"{BASE}/reply").mock(side_effect=httpx.ConnectError("down"))
            with pytest.raises(NetworkError):
                await client.fetch_status(JobHandle("job-42"))

    @pytest.mark.parametrize(
        "error",
        [httpx.DecodingError("bad gzip"), httpx.TooManyRedirects("loop")],
        ids=["decoding", "redirects"],
    )
    async def test_unreadable_response_raises_network_error(
        self, client: JobClient, error: httpx.HTTPError
    ) -> None:
        with respx.mock:
            respx.get(f"{BASE}/reply").mock(side_effect=error)
            with pytest.raises(NetworkError):
                await client.fetch_status(JobHandle("job-42"))

    async def test_invalid_json_raises_malformed_payload(self, client: JobClient) -> None:
        with respx.mock:
            respx.get(f"{BASE}/reply").mock(
                return_value=httpx.Response(200, text="<html>oops</html>")
            )
            with pytest.raises(MalformedPayload):
                await client.fetch_status(JobHandle("job-42"))
