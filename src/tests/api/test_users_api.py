"""Test user discovery and follow endpoints."""

import pytest
from httpx import AsyncClient

AuthHeaders = dict[str, str]


class TestExploreUsers:
    @pytest.mark.asyncio
    async def test_explore_without_auth(
        self, async_client: AsyncClient, octocat: AuthHeaders, hubot: AuthHeaders
    ) -> None:
        await async_client.post("/api/repositories", json={"name": "hello-world"}, headers=octocat)
        await async_client.post("/api/users/octocat/follow", headers=hubot)

        response = await async_client.get("/api/users/explore")

        assert response.status_code == 200
        users = response.json()["users"]
        assert [user["username"] for user in users] == ["octocat", "hubot"]
        top = users[0]
        assert top["name"] == "Octocat"
        assert top["repositories"] == 1
        assert top["followers"] == 1
        assert top["following"] == 0
        assert top["bio"] == "Developer with 1 repositories"

    @pytest.mark.asyncio
    async def test_empty(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/users/explore")

        assert response.json() == {"success": True, "users": []}


class TestFollow:
    @pytest.mark.asyncio
    async def test_follow_and_unfollow(
        self, async_client: AsyncClient, octocat: AuthHeaders, hubot: AuthHeaders
    ) -> None:
        followed = await async_client.post("/api/users/hubot/follow", headers=octocat)
        again = await async_client.post("/api/users/hubot/follow", headers=octocat)
        unfollowed = await async_client.delete("/api/users/hubot/follow", headers=octocat)
        not_following = await async_client.delete("/api/users/hubot/follow", headers=octocat)

        assert followed.status_code == 200
        assert followed.json() == {"success": True, "message": "Now following hubot"}
        assert again.status_code == 409
        assert unfollowed.status_code == 200
        assert not_following.status_code == 400

    @pytest.mark.asyncio
    async def test_self_follow_is_400(self, async_client: AsyncClient, octocat: AuthHeaders) -> None:
        response = await async_client.post("/api/users/octocat/follow", headers=octocat)

        assert response.status_code == 400
        assert response.json()["message"] == "You cannot follow yourself"

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, async_client: AsyncClient, octocat: AuthHeaders) -> None:
        response = await async_client.post("/api/users/ghost/follow", headers=octocat)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_auth(self, async_client: AsyncClient, octocat: AuthHeaders) -> None:
        response = await async_client.post("/api/users/octocat/follow")

        assert response.status_code == 401
