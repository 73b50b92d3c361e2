"""Custom exception hierarchy for McKinley."""

from typing import Any


class McKinleyError(Exception):
    """Base exception for all McKinley errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ----- Configuration Errors -----


class ConfigurationError(McKinleyError):
    """The client was configured inconsistently."""

    pass


class PinnedCertificateError(ConfigurationError):
    """The pinned certificate file exists but could not be read or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            message=f"Pinned certificate at {path} is unusable: {reason}",
            details={"path": path, "reason": reason},
        )


# ----- Request Construction Errors -----


class MultipartFileError(McKinleyError):
    """A file referenced by a multipart upload could not be read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            message=f"Cannot read upload file {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class FileTooLargeError(MultipartFileError):
    """Upload file exceeds the configured size cap."""

    def __init__(self, path: str, size: int, max_bytes: int) -> None:
        super().__init__(path, f"file too large ({size} > {max_bytes} bytes)")
        self.details.update({"size": size, "max_bytes": max_bytes})


class ImageEncodingError(MultipartFileError):
    """An image value of a multipart upload could not be encoded as JPEG."""

    def __init__(self, field: str, reason: str) -> None:
        McKinleyError.__init__(
            self,
            message=f"Cannot encode image for field {field}: {reason}",
            details={"field": field, "reason": reason},
        )
