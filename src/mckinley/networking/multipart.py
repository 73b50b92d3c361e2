"""multipart/form-data body construction for upload calls."""

import io
import mimetypes
import uuid
from collections.abc import Mapping
from pathlib import Path

from PIL import Image

from mckinley.networking.models import FileRef, FileRefList, ImageFile, ImageList, MultipartFile
from mckinley.shared.exceptions import FileTooLargeError, ImageEncodingError, MultipartFileError
from mckinley.shared.logging import get_logger

logger = get_logger(__name__)

CRLF = "\r\n"
JPEG_QUALITY = 60
IMAGE_MIME_TYPE = "image/jpg"
DEFAULT_MIME_TYPE = "application/octet-stream"


def generate_boundary() -> str:
    """Boundary string: ``Boundary-`` followed by an upper-case UUID."""
    return f"Boundary-{str(uuid.uuid4()).upper()}"


def mime_type_for(path: Path) -> str:
    """Guess the MIME type from a file extension."""
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or DEFAULT_MIME_TYPE


def encode_jpeg(image: Image.Image, field: str = "image") -> bytes:
    """Encode an image as JPEG at the fixed upload quality.

    Raises:
        ImageEncodingError: If Pillow cannot convert or encode the image
    """
    try:
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=JPEG_QUALITY)
    except (OSError, ValueError) as e:
        raise ImageEncodingError(field, str(e)) from e
    return buffer.getvalue()


def read_file_bounded(path: Path, max_bytes: int) -> bytes:
    """Read file bytes, refusing files larger than ``max_bytes``.

    Raises:
        FileTooLargeError: If the file exceeds the cap
        MultipartFileError: If the file cannot be read
    """
    try:
        size = path.stat().st_size
        if size > max_bytes:
            raise FileTooLargeError(str(path), size, max_bytes)
        return path.read_bytes()
    except OSError as e:
        raise MultipartFileError(str(path), e.strerror or str(e)) from e


def _file_part(boundary: str, name: str, filename: str, mime_type: str, data: bytes) -> bytes:
    head = (
        f"--{boundary}{CRLF}"
        f'Content-Disposition: form-data; name="{name}"; filename="{filename}"{CRLF}'
        f"Content-Type: {mime_type}{CRLF}{CRLF}"
    )
    return head.encode("utf-8") + data + CRLF.encode("utf-8")


def _image_filename(key: str) -> str:
    return f"{key}_{str(uuid.uuid4()).upper()}.jpg"


def _extension(path: Path) -> str:
    return path.suffix.lstrip(".")


def build_multipart_body(
    parameters: Mapping[str, str] | None,
    files: Mapping[str, MultipartFile] | None,
    boundary: str,
    max_file_bytes: int,
) -> bytes:
    """Encode string parameters and file values as a multipart/form-data body.

    Parameters come first, then one or more parts per file entry, then the
    closing boundary. List values produce parts named ``<key>[<index>]``.

    Raises:
        MultipartFileError: If a referenced file cannot be read or an image
            cannot be encoded
        TypeError: If a file value is not a known multipart file type
    """
    parts: list[bytes] = []

    for key, value in (parameters or {}).items():
        parts.append(
            (
                f"--{boundary}{CRLF}"
                f'Content-Disposition: form-data; name="{key}"{CRLF}{CRLF}'
                f"{value}{CRLF}"
            ).encode("utf-8")
        )

    for key, file_value in (files or {}).items():
        if isinstance(file_value, ImageFile):
            parts.append(
                _file_part(
                    boundary,
                    key,
                    _image_filename(key),
                    IMAGE_MIME_TYPE,
                    encode_jpeg(file_value.image, key),
                )
            )
        elif isinstance(file_value, ImageList):
            for index, image in enumerate(file_value.images):
                parts.append(
                    _file_part(
                        boundary,
                        f"{key}[{index}]",
                        _image_filename(key),
                        IMAGE_MIME_TYPE,
                        encode_jpeg(image, f"{key}[{index}]"),
                    )
                )
        elif isinstance(file_value, FileRef):
            path = file_value.path
            parts.append(
                _file_part(
                    boundary,
                    key,
                    f"{key}.{_extension(path)}",
                    mime_type_for(path),
                    read_file_bounded(path, max_file_bytes),
                )
            )
        elif isinstance(file_value, FileRefList):
            for index, path in enumerate(file_value.paths):
                parts.append(
                    _file_part(
                        boundary,
                        f"{key}[{index}]",
                        f"{key}{index}.{_extension(path)}",
                        mime_type_for(path),
                        read_file_bounded(path, max_file_bytes),
                    )
                )
        else:
            raise TypeError(f"Unsupported multipart value for {key!r}: {type(file_value).__name__}")

    parts.append(f"--{boundary}--{CRLF}".encode("utf-8"))
    body = b"".join(parts)

    logger.debug("multipart_body_built", size=len(body), fields=len(parameters or {}), files=len(files or {}))
    return body
