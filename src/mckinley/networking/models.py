"""Value types shared by the request/response pipeline."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Generic, TypeAlias, TypeVar, Union

from PIL import Image

from mckinley.networking.errors import ApiErrorKind, ApiServiceError

T = TypeVar("T")


class HttpMethod(str, Enum):
    """HTTP verbs the client issues."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass(frozen=True)
class RequestSpec:
    """A fully resolved outgoing request. Built before any I/O starts."""

    url: str
    method: HttpMethod
    headers: Mapping[str, str] = field(default_factory=dict)
    content: bytes | None = None


@dataclass(frozen=True)
class RawResponse:
    """Status, headers and undecoded body of a completed exchange."""

    status_code: int
    headers: Mapping[str, str]
    body: bytes


# ----- Multipart file values -----


@dataclass(frozen=True)
class ImageFile:
    """A single image, sent as JPEG."""

    image: Image.Image


@dataclass(frozen=True)
class ImageList:
    """Several images under one field, sent as ``<key>[<index>]`` parts."""

    images: list[Image.Image]


@dataclass(frozen=True)
class FileRef:
    """A file on disk, sent with a MIME type guessed from its extension."""

    path: Path


@dataclass(frozen=True)
class FileRefList:
    """Several files on disk under one field."""

    paths: list[Path]


MultipartFile: TypeAlias = Union[ImageFile, ImageList, FileRef, FileRefList]


# ----- Results -----


@dataclass(frozen=True)
class Success(Generic[T]):
    """A call that produced a decoded value."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A call that ended in a typed error."""

    error: ApiServiceError

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def of(cls, kind: ApiErrorKind, payload: object = None) -> "Failure":
        return cls(ApiServiceError(kind, payload))


ApiResult: TypeAlias = Union[Success[T], Failure]
