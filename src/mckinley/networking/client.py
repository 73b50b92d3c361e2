"""Typed REST client façade.

Example usage:
    async with ApiClient.from_settings() as client:
        result = await client.call("login", Token, method=HttpMethod.POST, params={"id": "secret"})
        match result:
            case Success(value=token):
                ...
            case Failure(error=error):
                print(error.user_message)
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import TracebackType
from typing import Any, TypeVar

import httpx

from mckinley.config import DEFAULT_UPLOAD_MAX_BYTES, Settings, get_settings
from mckinley.networking.decoder import ResponseDecoder
from mckinley.networking.endpoints import (
    DEFAULT_ENDPOINTS,
    Endpoint,
    EndpointRegistry,
    UnknownEndpointError,
)
from mckinley.networking.errors import ApiErrorKind, ApiServiceError
from mckinley.networking.models import ApiResult, Failure, HttpMethod, MultipartFile
from mckinley.networking.multipart import build_multipart_body, generate_boundary
from mckinley.networking.request_builder import build_request, build_upload_request
from mckinley.networking.transport import TransportExecutor
from mckinley.networking.trust import PinnedCertificate, TrustVerifier
from mckinley.observability.metrics import record_outcome, track_latency
from mckinley.shared.concurrency import BlockingIOLimiter
from mckinley.shared.exceptions import MultipartFileError
from mckinley.shared.logging import call_context, get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def _outcome(result: ApiResult[Any]) -> str:
    return "success" if result.ok else result.error.kind.value


class ApiClient:
    """Builds, sends and decodes calls to registered endpoints.

    One instance owns one ``httpx.AsyncClient``; share the instance rather
    than creating one per call. Calls may run concurrently.
    """

    def __init__(
        self,
        registry: EndpointRegistry,
        http_client: httpx.AsyncClient,
        decoder: ResponseDecoder | None = None,
        upload_max_bytes: int = DEFAULT_UPLOAD_MAX_BYTES,
        blocking_io: BlockingIOLimiter | None = None,
    ) -> None:
        self.registry = registry
        self.decoder = decoder or ResponseDecoder()
        self.upload_max_bytes = upload_max_bytes
        self.blocking_io = blocking_io or BlockingIOLimiter()
        self._http_client = http_client
        self.transport = TransportExecutor(http_client)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        endpoints: Iterable[Endpoint] = DEFAULT_ENDPOINTS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ApiClient":
        """Build a client from configuration.

        Args:
            settings: Settings to use (default: cached application settings)
            endpoints: Endpoints to register
            transport: Optional httpx transport, mainly for tests

        Raises:
            PinnedCertificateError: If pinning is on and the certificate file is unusable
        """
        settings = settings or get_settings()

        verify: Any = True
        if settings.ssl_pinning_enabled:
            verifier = TrustVerifier(PinnedCertificate.load(settings.pinned_certificate_path))
            verify = verifier.ssl_context()

        http_client = httpx.AsyncClient(
            timeout=settings.request_timeout,
            verify=verify,
            transport=transport,
        )
        return cls(
            registry=EndpointRegistry.from_settings(settings, endpoints),
            http_client=http_client,
            decoder=ResponseDecoder(settings.json_date_format),
            upload_max_bytes=settings.upload_max_bytes,
            blocking_io=BlockingIOLimiter(settings.blocking_io_limit),
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._http_client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def endpoint(self, name: str) -> "BoundEndpoint":
        """Per-endpoint view exposing ``call`` and ``upload``."""
        return BoundEndpoint(self, self.registry.resolve(name))

    def _resolve(self, endpoint: Endpoint | str) -> tuple[Endpoint, str] | Failure:
        if isinstance(endpoint, str):
            try:
                endpoint = self.registry.resolve(endpoint)
            except UnknownEndpointError:
                logger.error("api_unknown_endpoint", endpoint=endpoint, known=self.registry.names)
                return Failure.of(ApiErrorKind.INVALID_ENDPOINT, payload=endpoint)

        url = self.registry.url_for(endpoint)
        if url is None:
            logger.error(
                "api_invalid_endpoint",
                endpoint=endpoint.name,
                relative_path=endpoint.relative_path,
                environment=self.registry.environment.value,
            )
            return Failure.of(ApiErrorKind.INVALID_ENDPOINT, payload=endpoint.name)
        return endpoint, url

    async def call(
        self,
        endpoint: Endpoint | str,
        shape: type[T],
        method: HttpMethod = HttpMethod.POST,
        params: Mapping[str, Any] | None = None,
    ) -> ApiResult[T]:
        """Send a data request and decode the response into ``shape``.

        Args:
            endpoint: Endpoint or registered endpoint name
            shape: Type the response body is decoded into
            method: HTTP verb (default POST)
            params: Query parameters for GET, JSON body otherwise

        Returns:
            Success with the decoded value, or Failure with an ApiServiceError
        """
        resolved = self._resolve(endpoint)
        if isinstance(resolved, Failure):
            return resolved
        target, url = resolved

        with call_context(target.name, method.value):
            logger.info("api_request", url=url)
            logger.debug("api_request_params", param_keys=list(params or {}))

            spec = build_request(url, method, target.headers, params)

            with track_latency(target.name, method.value):
                raw = await self.transport.execute(spec)
                result: ApiResult[T] = (
                    raw if isinstance(raw, Failure) else self.decoder.decode(raw.value, shape, method)
                )

        record_outcome(target.name, method.value, _outcome(result))
        return result

    async def upload(
        self,
        endpoint: Endpoint | str,
        shape: type[T],
        params: Mapping[str, str] | None = None,
        files: Mapping[str, MultipartFile] | None = None,
    ) -> ApiResult[T]:
        """POST a multipart/form-data body and decode the response into ``shape``.

        Unreadable files and images Pillow cannot encode end the call with
        ``io_error`` before anything is sent.

        Raises:
            TypeError: If a value in ``files`` is not one of the ``MultipartFile`` types
        """
        resolved = self._resolve(endpoint)
        if isinstance(resolved, Failure):
            return resolved
        target, url = resolved
        method = HttpMethod.POST

        with call_context(target.name, method.value):
            result: ApiResult[T] = await self._send_upload(url, target, shape, params, files)

        record_outcome(target.name, method.value, _outcome(result))
        return result

    async def _send_upload(
        self,
        url: str,
        target: Endpoint,
        shape: type[T],
        params: Mapping[str, str] | None,
        files: Mapping[str, MultipartFile] | None,
    ) -> ApiResult[T]:
        logger.info(
            "api_upload",
            url=url,
            param_keys=list(params or {}),
            file_fields=list(files or {}),
        )

        boundary = generate_boundary()
        try:
            body = await self.blocking_io.run(
                build_multipart_body, params, files, boundary, self.upload_max_bytes
            )
        except MultipartFileError as e:
            logger.error("api_upload_file_unreadable", error_type=type(e).__name__, **e.details)
            return Failure(ApiServiceError(ApiErrorKind.IO_ERROR, payload=e))

        spec = build_upload_request(url, body, boundary, target.headers)

        with track_latency(target.name, HttpMethod.POST.value):
            raw = await self.transport.execute(spec)
            if isinstance(raw, Failure):
                return raw
            return self.decoder.decode_upload(raw.value, shape)


@dataclass(frozen=True)
class BoundEndpoint:
    """An endpoint paired with the client that calls it."""

    client: ApiClient
    endpoint: Endpoint

    async def call(
        self,
        shape: type[T],
        method: HttpMethod = HttpMethod.POST,
        params: Mapping[str, Any] | None = None,
    ) -> ApiResult[T]:
        return await self.client.call(self.endpoint, shape, method=method, params=params)

    async def upload(
        self,
        shape: type[T],
        params: Mapping[str, str] | None = None,
        files: Mapping[str, MultipartFile] | None = None,
    ) -> ApiResult[T]:
        return await self.client.upload(self.endpoint, shape, params=params, files=files)
