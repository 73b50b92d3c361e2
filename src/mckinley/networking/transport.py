"""Executes a RequestSpec over httpx."""

import httpx

from mckinley.networking.errors import ApiErrorKind, ApiServiceError
from mckinley.networking.models import (
    ApiResult,
    Failure,
    RawResponse,
    RequestSpec,
    Success,
)
from mckinley.shared.logging import get_logger

logger = get_logger(__name__)


class TransportExecutor:
    """Sends requests and normalizes the outcome into an ApiResult.

    No JSON decoding and no status-code interpretation happens here.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def execute(self, spec: RequestSpec) -> ApiResult[RawResponse]:
        """Send ``spec`` and return the raw response or a transport failure."""
        try:
            request = self._client.build_request(
                spec.method.value,
                spec.url,
                headers=dict(spec.headers),
                content=spec.content,
            )
        except httpx.InvalidURL as e:
            logger.error("api_invalid_url", url=spec.url, error=str(e))
            return Failure(ApiServiceError(ApiErrorKind.INVALID_ENDPOINT, payload=e))

        try:
            response = await self._client.send(request)
        except httpx.HTTPError as e:
            logger.error(
                "api_transport_error",
                url=spec.url,
                method=spec.method.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return Failure(ApiServiceError(ApiErrorKind.TRANSPORT_ERROR, payload=e))

        if response is None:
            logger.error("api_no_response", url=spec.url, method=spec.method.value)
            return Failure.of(ApiErrorKind.NO_DATA)

        return Success(
            RawResponse(
                status_code=response.status_code,
                headers=dict(response.headers),
                body=response.content,
            )
        )
