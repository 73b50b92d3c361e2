"""Unit tests for the login service."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from mckinley.networking.errors import ApiErrorKind
from mckinley.networking.models import Failure, HttpMethod, Success
from mckinley.services.login import Token, login


class TestLogin:
    """Tests for the login call site."""

    async def test_login_success(self, token_client):
        result = await login(token_client, "user1", "pass1")

        assert result == Success(Token(token="abc123"))

    async def test_login_sends_id_password_pair(self):
        client = MagicMock()
        client.call = AsyncMock(return_value=Success(Token(token="t")))

        await login(client, "eve.holt@reqres.in", "cityslicka")

        client.call.assert_called_once_with(
            "login",
            Token,
            method=HttpMethod.POST,
            params={"eve.holt@reqres.in": "cityslicka"},
        )

    async def test_login_validation_error(self, make_client):
        client = make_client(
            lambda request: httpx.Response(422, content=json.dumps({"error": "x"}).encode())
        )

        async with client:
            result = await login(client, "user1", "pass1")

        assert isinstance(result, Failure)
        assert result.error.kind is ApiErrorKind.VALIDATION_ERRORS_422
        assert result.error.user_message == "Validation Error"

    @pytest.mark.parametrize("user_id,password", [("", "pass"), ("user", ""), ("", "")])
    async def test_missing_credentials(self, user_id, password):
        with pytest.raises(ValueError, match="mandatory"):
            await login(MagicMock(), user_id, password)
