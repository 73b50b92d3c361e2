"""Typed REST request/response pipeline."""

from mckinley.networking.client import ApiClient, BoundEndpoint
from mckinley.networking.decoder import ApiDate, ResponseDecoder
from mckinley.networking.endpoints import (
    DEFAULT_HEADERS,
    LOGIN,
    APIEnvironment,
    Endpoint,
    EndpointRegistry,
    UnknownEndpointError,
)
from mckinley.networking.errors import ApiErrorKind, ApiServiceError
from mckinley.networking.models import (
    ApiResult,
    Failure,
    FileRef,
    FileRefList,
    HttpMethod,
    ImageFile,
    ImageList,
    MultipartFile,
    RawResponse,
    RequestSpec,
    Success,
)
from mckinley.networking.trust import PinnedCertificate, TrustDecision, TrustVerifier

__all__ = [
    # Client
    "ApiClient",
    "BoundEndpoint",
    "ResponseDecoder",
    "ApiDate",
    # Endpoints
    "APIEnvironment",
    "Endpoint",
    "EndpointRegistry",
    "UnknownEndpointError",
    "DEFAULT_HEADERS",
    "LOGIN",
    # Results and errors
    "ApiResult",
    "Success",
    "Failure",
    "ApiErrorKind",
    "ApiServiceError",
    # Requests
    "HttpMethod",
    "RequestSpec",
    "RawResponse",
    # Multipart file values
    "MultipartFile",
    "ImageFile",
    "ImageList",
    "FileRef",
    "FileRefList",
    # SSL pinning
    "PinnedCertificate",
    "TrustDecision",
    "TrustVerifier",
]
