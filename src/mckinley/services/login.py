"""Login call against the ``login`` endpoint."""

from pydantic import BaseModel

from mckinley.networking.client import ApiClient
from mckinley.networking.models import ApiResult, HttpMethod


class Token(BaseModel):
    """Token returned by a successful login."""

    token: str


async def login(client: ApiClient, user_id: str, password: str) -> ApiResult[Token]:
    """POST ``{user_id: password}`` to the login endpoint.

    Raises:
        ValueError: If the ID or the password is empty
    """
    if not user_id or not password:
        raise ValueError("ID and Password are mandatory.")

    return await client.call("login", Token, method=HttpMethod.POST, params={user_id: password})
