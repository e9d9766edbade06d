"""Test the sign-up, sign-in and admin login endpoints."""

from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from httpx import AsyncClient

SIGNUP = "/api/auth/signup"
SIGNIN = "/api/auth/signin"
ADMIN_LOGIN = "/api/admin/auth/login"

SignUp = Callable[..., Awaitable[dict[str, Any]]]


class TestSignUp:
    @pytest.mark.asyncio
    async def test_sign_up_returns_token_and_user(self, sign_up: SignUp) -> None:
        body = await sign_up("octocat", fullName="The Octocat")

        assert body["success"] is True
        assert body["token"]
        assert body["user"]["username"] == "octocat"
        assert body["user"]["email"] == "octocat@example.com"
        assert body["user"]["fullName"] == "The Octocat"
        assert "password" not in body["user"]
        assert "passwordHash" not in body["user"]

    @pytest.mark.asyncio
    async def test_duplicate_is_409(self, async_client: AsyncClient, sign_up: SignUp) -> None:
        await sign_up("octocat")

        response = await async_client.post(
            SIGNUP,
            json={
                "username": "octocat",
                "email": "different@example.com",
                "fullName": "Copycat",
                "password": "hunter2hunter2",
            },
        )

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "message": "User with this email or username already exists",
        }

    @pytest.mark.asyncio
    async def test_missing_fields_is_400(self, async_client: AsyncClient) -> None:
        response = await async_client.post(SIGNUP, json={"username": "octocat"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "email" in body["message"]
        assert "password" in body["message"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [{"username": "has space"}, {"email": "not-an-email"}, {"username": "x" * 40}],
    )
    async def test_invalid_fields_are_400(self, async_client: AsyncClient, overrides: dict[str, str]) -> None:
        payload = {
            "username": "octocat",
            "email": "octocat@example.com",
            "fullName": "The Octocat",
            "password": "hunter2hunter2",
            **overrides,
        }

        response = await async_client.post(SIGNUP, json=payload)

        assert response.status_code == 400


class TestSignIn:
    @pytest.mark.asyncio
    async def test_sign_in(self, async_client: AsyncClient, sign_up: SignUp) -> None:
        await sign_up("octocat")

        response = await async_client.post(
            SIGNIN, json={"email": "octocat@example.com", "password": "hunter2hunter2"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["user"]["username"] == "octocat"
        assert body["token"]

    @pytest.mark.asyncio
    async def test_long_password_accepted(self, async_client: AsyncClient, sign_up: SignUp) -> None:
        passphrase = "correct horse battery staple " * 3
        assert len(passphrase.encode("utf-8")) > 72
        await sign_up("octocat", password=passphrase)

        response = await async_client.post(
            SIGNIN, json={"email": "octocat@example.com", "password": passphrase}
        )

        assert response.status_code == 200
        assert response.json()["user"]["username"] == "octocat"

    @pytest.mark.asyncio
    async def test_long_password_compared_on_first_72_bytes(
        self, async_client: AsyncClient, sign_up: SignUp
    ) -> None:
        await sign_up("octocat", password="p" * 72 + "-written-at-signup")

        response = await async_client.post(
            SIGNIN, json={"email": "octocat@example.com", "password": "p" * 72 + "-typed-later"}
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_password_is_401(self, async_client: AsyncClient, sign_up: SignUp) -> None:
        await sign_up("octocat")

        response = await async_client.post(
            SIGNIN, json={"email": "octocat@example.com", "password": "wrong"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_unknown_email_is_401(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            SIGNIN, json={"email": "ghost@example.com", "password": "whatever"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_password_is_400(self, async_client: AsyncClient) -> None:
        response = await async_client.post(SIGNIN, json={"email": "octocat@example.com"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_token_works_on_protected_route(self, async_client: AsyncClient, sign_up: SignUp) -> None:
        await sign_up("octocat")
        signin = await async_client.post(
            SIGNIN, json={"email": "octocat@example.com", "password": "hunter2hunter2"}
        )

        response = await async_client.get(
            "/api/repositories",
            headers={"Authorization": f"Bearer {signin.json()['token']}"},
        )

        assert response.status_code == 200


class TestAdminLogin:
    @pytest.mark.asyncio
    async def test_admin_login(self, async_client: AsyncClient) -> None:
        response = await async_client.post(ADMIN_LOGIN, json={"username": "admin", "password": "admin123"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["token"]
        assert body["user"] == {"id": "admin-1", "username": "admin", "role": "Administrator"}

    @pytest.mark.asyncio
    async def test_bad_admin_credentials_are_401(self, async_client: AsyncClient) -> None:
        response = await async_client.post(ADMIN_LOGIN, json={"username": "admin", "password": "guess"})

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid credentials"}

    @pytest.mark.asyncio
    async def test_missing_admin_fields_are_400(self, async_client: AsyncClient) -> None:
        response = await async_client.post(ADMIN_LOGIN, json={})

        assert response.status_code == 400
