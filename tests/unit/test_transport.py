"""Unit tests for the transport executor."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from mckinley.networking.errors import ApiErrorKind
from mckinley.networking.models import HttpMethod, RawResponse, RequestSpec, Success
from mckinley.networking.transport import TransportExecutor

URL = "https://api.example.test/items"


class TestTransportExecutor:
    """Tests for normalizing transport outcomes."""

    async def test_success_returns_raw_response(self):
        """Test status, headers and body are passed through undecoded."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(404, headers={"X-Id": "7"}, content=b"not json at all")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await TransportExecutor(client).execute(
                RequestSpec(
                    url=URL,
                    method=HttpMethod.PUT,
                    headers={"X-Trace": "1"},
                    content=b'{"a": 1}',
                )
            )

        assert isinstance(result, Success)
        assert isinstance(result.value, RawResponse)
        assert result.value.status_code == 404
        assert result.value.body == b"not json at all"
        assert result.value.headers["x-id"] == "7"
        assert seen[0].method == "PUT"
        assert seen[0].headers["X-Trace"] == "1"
        assert seen[0].content == b'{"a": 1}'

    @pytest.mark.parametrize(
        "exc",
        [
            httpx.ConnectError("TLS handshake cancelled"),
            httpx.ReadTimeout("timed out"),
            httpx.RemoteProtocolError("server hung up"),
        ],
    )
    async def test_transport_errors(self, exc):
        def handler(request: httpx.Request) -> httpx.Response:
            raise exc

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await TransportExecutor(client).execute(RequestSpec(url=URL, method=HttpMethod.GET))

        assert result.error.kind is ApiErrorKind.TRANSPORT_ERROR
        assert result.error.payload is exc

    async def test_missing_response_is_no_data(self):
        mock_client = MagicMock(spec=httpx.AsyncClient)
        mock_client.send = AsyncMock(return_value=None)

        result = await TransportExecutor(mock_client).execute(RequestSpec(url=URL, method=HttpMethod.GET))

        assert result.error.kind is ApiErrorKind.NO_DATA

    async def test_invalid_url_is_invalid_endpoint(self):
        async with httpx.AsyncClient() as client:
            result = await TransportExecutor(client).execute(
                RequestSpec(url="https://exa mple.test:port/", method=HttpMethod.GET)
            )

        assert result.error.kind is ApiErrorKind.INVALID_ENDPOINT
