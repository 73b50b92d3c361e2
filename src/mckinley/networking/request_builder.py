"""Turns a URL, verb, headers and parameters into a RequestSpec."""

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, urlsplit, urlunsplit

from mckinley.networking.models import HttpMethod, RequestSpec
from mckinley.shared.logging import get_logger

logger = get_logger(__name__)

# RFC 3986 section 3.4: "?" and "/" may stay literal inside a query, every
# general (":#[]@") and sub-delimiter ("!$&'()*+,;=") is escaped.
QUERY_SAFE_CHARACTERS = "/?"


def escape_query_component(value: str) -> str:
    """Percent-encode a query key or value."""
    return quote(value, safe=QUERY_SAFE_CHARACTERS)


def percent_escaped(parameters: Mapping[str, Any]) -> str:
    """Render a mapping as ``key=value`` pairs joined with ``&``."""
    return "&".join(
        f"{escape_query_component(str(key))}={escape_query_component(str(value))}"
        for key, value in parameters.items()
    )


def _with_query(url: str, parameters: Mapping[str, str]) -> str:
    scheme, netloc, path, query, fragment = urlsplit(url)
    encoded = percent_escaped(parameters)
    query = f"{query}&{encoded}" if query else encoded
    return urlunsplit((scheme, netloc, path, query, fragment))


def _json_body(parameters: Mapping[str, Any]) -> bytes | None:
    try:
        return json.dumps(parameters, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        logger.error("request_body_encoding_failed", error=str(e))
        return None


def build_request(
    url: str,
    method: HttpMethod,
    headers: Mapping[str, str] | None = None,
    parameters: Mapping[str, Any] | None = None,
) -> RequestSpec:
    """Build a request.

    GET parameters become query items and must all be strings. For POST, PUT
    and DELETE a non-empty parameter mapping is sent as a JSON object; if it
    cannot be serialized the failure is logged and the request goes out
    without a body.
    """
    request_headers: dict[str, str] = {}
    content: bytes | None = None

    if parameters:
        if method is HttpMethod.GET:
            if all(isinstance(value, str) for value in parameters.values()):
                url = _with_query(url, parameters)
            else:
                logger.warning("get_parameters_not_strings", url=url, keys=list(parameters))
        else:
            content = _json_body(parameters)
            if content is not None:
                request_headers["Content-Type"] = "application/json"

    if headers:
        request_headers.update(headers)

    return RequestSpec(url=url, method=method, headers=request_headers, content=content)


def build_upload_request(
    url: str,
    body: bytes,
    boundary: str,
    headers: Mapping[str, str] | None = None,
) -> RequestSpec:
    """Build a POST carrying an already encoded multipart body."""
    request_headers = dict(headers or {})
    request_headers["Content-Type"] = f"multipart/form-data; boundary={boundary}"
    return RequestSpec(url=url, method=HttpMethod.POST, headers=request_headers, content=body)
