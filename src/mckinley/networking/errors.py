"""Typed errors surfaced by the API client."""

from enum import Enum
from typing import Any

from mckinley.shared.exceptions import McKinleyError


class ApiErrorKind(str, Enum):
    """Discriminant for every failure an API call can end in."""

    TRANSPORT_ERROR = "transport_error"  # Raised by the HTTP transport
    INVALID_ENDPOINT = "invalid_endpoint"  # Endpoint URL cannot be resolved
    INVALID_RESPONSE = "invalid_response"  # Unexpected status code
    NO_DATA = "no_data"  # Transport finished without a response
    DECODE_ERROR = "decode_error"  # Body does not fit the requested shape
    SUCCESS_WITH_ERROR = "success_with_error"
    NOT_FOUND_404 = "not_found_404"
    INTERNAL_SERVER_ERROR_500 = "internal_server_error_500"
    VALIDATION_ERRORS_422 = "validation_errors_422"
    SUCCESS_WITH_204 = "success_with_204"  # DELETE answered 204 with no decodable body
    IO_ERROR = "io_error"  # Local file for an upload could not be read


_USER_MESSAGES: dict[ApiErrorKind, str] = {
    ApiErrorKind.TRANSPORT_ERROR: "Connection to the server failed",
    ApiErrorKind.INVALID_ENDPOINT: "Invalid API endpoint",
    ApiErrorKind.INVALID_RESPONSE: "Invalid response received from server",
    ApiErrorKind.NO_DATA: "No data available",
    ApiErrorKind.DECODE_ERROR: "Response could not be read",
    ApiErrorKind.SUCCESS_WITH_ERROR: "Request succeeded with errors",
    ApiErrorKind.NOT_FOUND_404: "Not Found",
    ApiErrorKind.INTERNAL_SERVER_ERROR_500: "Internal Server Error",
    ApiErrorKind.VALIDATION_ERRORS_422: "Validation Error",
    ApiErrorKind.SUCCESS_WITH_204: "No Content",
    ApiErrorKind.IO_ERROR: "Upload file could not be read",
}


class ApiServiceError(McKinleyError):
    """A failed API call.

    Two errors are equal when they share the same ``kind``; the attached
    payload never takes part in the comparison.
    """

    def __init__(
        self,
        kind: ApiErrorKind,
        payload: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.kind = kind
        self.payload = payload
        super().__init__(message=kind.value, details=details)

    @property
    def user_message(self) -> str:
        """Short human-readable description of the failure."""
        return _USER_MESSAGES[self.kind]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ApiServiceError):
            return NotImplemented
        return self.kind == other.kind

    def __hash__(self) -> int:
        return hash(self.kind)

    def __repr__(self) -> str:
        return f"ApiServiceError({self.kind.value})"
