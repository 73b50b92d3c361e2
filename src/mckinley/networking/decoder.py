"""Status-code mapping and typed decoding of response bodies."""

import dataclasses
import json
import types
from collections.abc import Mapping
from datetime import datetime
from functools import lru_cache
from typing import Annotated, Any, TypeVar, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, BeforeValidator, TypeAdapter, ValidationError, ValidationInfo

from mckinley.config import DEFAULT_JSON_DATE_FORMAT
from mckinley.networking.errors import ApiErrorKind, ApiServiceError
from mckinley.networking.models import ApiResult, Failure, HttpMethod, RawResponse, Success
from mckinley.shared.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SUCCESS_STATUS_CODES = frozenset({200, 201, 204})
UPLOAD_SUCCESS_STATUS_CODES = range(200, 299)  # 200..298

STATUS_CODE_ERRORS: dict[int, ApiErrorKind] = {
    404: ApiErrorKind.NOT_FOUND_404,
    500: ApiErrorKind.INTERNAL_SERVER_ERROR_500,
    422: ApiErrorKind.VALIDATION_ERRORS_422,
}

DATE_FORMAT_CONTEXT_KEY = "date_format"
LOGGED_BODY_LIMIT = 2000


def _parse_api_date(value: Any, info: ValidationInfo) -> Any:
    if isinstance(value, str):
        context = info.context or {}
        return datetime.strptime(value, context.get(DATE_FORMAT_CONTEXT_KEY, DEFAULT_JSON_DATE_FORMAT))
    return value


# Explicit marker for date fields the shape walk cannot reach, such as
# fields inside a union of several models
ApiDate = Annotated[datetime, BeforeValidator(_parse_api_date)]


@lru_cache(maxsize=256)
def _type_adapter(shape: Any) -> TypeAdapter[Any]:
    return TypeAdapter(shape)


def _unwrap_annotated(annotation: Any) -> Any:
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def _is_typed_dict(shape: type) -> bool:
    # Covers both typing and typing_extensions TypedDict classes
    return issubclass(shape, dict) and hasattr(shape, "__total__") and hasattr(shape, "__annotations__")


@lru_cache(maxsize=256)
def _field_annotations(shape: Any) -> dict[str, Any] | None:
    """JSON key to annotation for models, dataclasses and TypedDicts."""
    if get_origin(shape) is not None or not isinstance(shape, type):
        return None
    if issubclass(shape, BaseModel):
        fields: dict[str, Any] = {}
        for name, field in shape.model_fields.items():
            fields[name] = field.annotation
            for alias in (field.alias, field.validation_alias):
                if isinstance(alias, str):
                    fields[alias] = field.annotation
        return fields
    if dataclasses.is_dataclass(shape) or _is_typed_dict(shape):
        return get_type_hints(shape)
    return None


def apply_date_format(value: Any, annotation: Any, date_format: str) -> Any:
    """Parse every string sitting in a ``datetime`` position of ``annotation``.

    Walks decoded JSON alongside the shape it will be validated into: model,
    dataclass and TypedDict fields, containers, and optional values. Unions of
    several non-date types are left to pydantic.

    Raises:
        ValueError: If a date string does not match ``date_format``
    """
    annotation = _unwrap_annotated(annotation)
    if value is None:
        return value

    if annotation is datetime:
        if isinstance(value, str):
            return datetime.strptime(value, date_format)
        return value

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Union or origin is types.UnionType:
        arms = [arm for arm in args if arm is not type(None)]
        if len(arms) == 1:
            return apply_date_format(value, arms[0], date_format)
        if isinstance(value, str) and any(_unwrap_annotated(arm) is datetime for arm in arms):
            try:
                return datetime.strptime(value, date_format)
            except ValueError:
                # Another arm may accept the string as is
                return value
        return value

    if isinstance(value, list):
        if origin is tuple and args and args[-1] is not Ellipsis:
            return [
                apply_date_format(item, item_type, date_format) for item, item_type in zip(value, args)
            ] + value[len(args) :]
        if origin is not None and args:
            return [apply_date_format(item, args[0], date_format) for item in value]
        return value

    if isinstance(value, dict):
        fields = _field_annotations(annotation)
        if fields is not None:
            return {
                key: apply_date_format(item, fields[key], date_format) if key in fields else item
                for key, item in value.items()
            }
        if origin is not None and isinstance(origin, type) and issubclass(origin, Mapping) and len(args) == 2:
            return {key: apply_date_format(item, args[1], date_format) for key, item in value.items()}
        return value

    return value


def map_status_code(status_code: int) -> ApiErrorKind | None:
    """Error kind for a status code, or None if the body should be decoded."""
    if status_code in SUCCESS_STATUS_CODES:
        return None
    return STATUS_CODE_ERRORS.get(status_code, ApiErrorKind.INVALID_RESPONSE)


class ResponseDecoder:
    """Maps status codes to errors and decodes bodies into caller-chosen shapes.

    A shape is anything pydantic can validate: a ``BaseModel``, a dataclass, a
    ``TypedDict``, or a plain container type. Every ``datetime`` field of the
    shape parses strings with ``date_format``; ISO strings are not accepted
    unless the format says so.
    """

    def __init__(self, date_format: str = DEFAULT_JSON_DATE_FORMAT) -> None:
        self.date_format = date_format

    def _validate(self, body: bytes, shape: type[T]) -> T:
        """Parse JSON, apply the date format, validate into ``shape``.

        Raises:
            ValueError: Malformed JSON, a date not in the configured format, or
                a pydantic ValidationError
        """
        data = apply_date_format(json.loads(body), shape, self.date_format)
        return _type_adapter(shape).validate_python(data, context={DATE_FORMAT_CONTEXT_KEY: self.date_format})

    def _decode_failed(self, raw: RawResponse, error: ValueError) -> Failure:
        logger.warning(
            "api_decode_failed",
            status_code=raw.status_code,
            error_type=type(error).__name__,
            errors=error.error_count() if isinstance(error, ValidationError) else 1,
        )
        return Failure(ApiServiceError(ApiErrorKind.DECODE_ERROR, payload=error))

    def decode(self, raw: RawResponse, shape: type[T], method: HttpMethod) -> ApiResult[T]:
        """Decode a data-call response.

        Only 200, 201 and 204 are decoded. A DELETE answered with 204 whose
        body does not decode is reported as ``success_with_204`` rather than
        ``decode_error``.
        """
        kind = map_status_code(raw.status_code)
        if kind is not None:
            logger.warning("api_error_status", status_code=raw.status_code, kind=kind.value)
            return Failure(ApiServiceError(kind, payload=raw))

        logger.debug(
            "api_response",
            status_code=raw.status_code,
            body=raw.body[:LOGGED_BODY_LIMIT].decode("utf-8", errors="replace"),
        )

        try:
            return Success(self._validate(raw.body, shape))
        except ValueError as e:
            if method is HttpMethod.DELETE and raw.status_code == 204:
                return Failure(ApiServiceError(ApiErrorKind.SUCCESS_WITH_204, payload=raw))
            return self._decode_failed(raw, e)

    def decode_upload(self, raw: RawResponse, shape: type[T]) -> ApiResult[T]:
        """Decode an upload response; any status outside 200..298 is invalid."""
        if raw.status_code not in UPLOAD_SUCCESS_STATUS_CODES:
            logger.warning("api_upload_error_status", status_code=raw.status_code)
            return Failure(ApiServiceError(ApiErrorKind.INVALID_RESPONSE, payload=raw))

        try:
            return Success(self._validate(raw.body, shape))
        except ValueError as e:
            return self._decode_failed(raw, e)
