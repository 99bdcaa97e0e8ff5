"""Shared helpers for API tests."""
from httpx import AsyncClient


async def register(
    client: AsyncClient,
    *,
    email: str = "test@example.com",
    username: str = "testuser",
    password: str = "password123",
) -> tuple[str, dict]:
    """Register a user through the API and return (access_token, user)."""
    response = await client.post(
        "/auth/register",
        json={"email": email, "username": username, "password": password},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return body["access_token"], body["user"]


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
