"""
Pytest configuration and fixtures for McKinley tests.
"""
import json
from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest

from mckinley.config import Settings
from mckinley.networking.client import ApiClient

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def test_settings() -> Settings:
    """Settings for tests: no .env file, pinning off, fixed base URLs."""
    return Settings(
        _env_file=None,
        app_env="development",
        api_environment="beta",
        api_base_url_alpha="https://alpha.example.test/",
        api_base_url_beta="https://beta.example.test/api/",
        ssl_pinning_enabled=False,
    )


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    """Requests seen by the mock transport, in order."""
    return []


@pytest.fixture
def make_client(
    test_settings: Settings, recorded_requests: list[httpx.Request]
) -> Callable[[Handler], ApiClient]:
    """Factory building an ApiClient whose transport is served by ``handler``."""

    def factory(handler: Handler) -> ApiClient:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        return ApiClient.from_settings(
            test_settings, transport=httpx.MockTransport(recording_handler)
        )

    return factory


@pytest.fixture
async def token_client(make_client) -> AsyncGenerator[ApiClient, None]:
    """Client whose server answers every request with a token payload."""
    client = make_client(lambda request: json_response(200, {"token": "abc123"}))
    yield client
    await client.close()


def json_response(status_code: int, payload: Any) -> httpx.Response:
    """Build an httpx response with a JSON body."""
    return httpx.Response(status_code, content=json.dumps(payload).encode("utf-8"))
