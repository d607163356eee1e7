import pytest
from httpx import AsyncClient
from fastapi import status

from hrms.core.security import create_access_token
from tests.factories import DEFAULT_PASSWORD, auth_headers, create_user

@pytest.mark.asyncio
class TestAuth:
    """Test authentication endpoints"""

    async def test_login_success(self, client: AsyncClient, session):
        user = await create_user(session, "Dev One", role="Backend Developer", department="Engineering")

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "dev.one@company.com", "password": DEFAULT_PASSWORD},
        )
        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["id"] == user.id
        assert data["user"]["category"] == "Developer"
        assert "token" in response.cookies

    async def test_login_wrong_password(self, client: AsyncClient, session):
        await create_user(session, "Dev One")

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "dev.one@company.com", "password": "wrong"},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_me_with_bearer_token(self, client: AsyncClient, session):
        user = await create_user(session, "Hana HR", role="HR")

        response = await client.get("/api/v1/auth/me", headers=auth_headers(user))
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["role"] == "HR"

    async def test_me_with_cookie(self, client: AsyncClient, session):
        user = await create_user(session, "Hana HR", role="HR")
        client.cookies.set("token", create_access_token({"sub": str(user.id)}))

        response = await client.get("/api/v1/auth/me")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["email"] == "hana.hr@company.com"

    async def test_invalid_credentials(self, client: AsyncClient, session):
        user = await create_user(session, "Dev One")

        missing = await client.get("/api/v1/auth/me")
        garbage = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
        unknown = await client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {create_access_token({'sub': str(user.id + 100)})}"},
        )
        for response in (missing, garbage, unknown):
            assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "healthy"
        assert "X-Process-Time" in response.headers
