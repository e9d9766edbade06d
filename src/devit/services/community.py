"""User discovery and follow relationships."""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from devit.core.errors import (
    ErrorMessage,
    InvalidInputError,
    ResourceConflictError,
    ResourceNotFoundError,
)
from devit.core.logging import get_logger
from devit.models.user import User
from devit.repositories.base import ConflictError
from devit.repositories.follow import FollowRepository
from devit.repositories.user import UserRepository
from devit.schemas.user import ExploreUser

logger = get_logger(__name__)


class CommunityService:
    def __init__(self, session: AsyncSession) -> None:
        self._users = UserRepository(session)
        self._follows = FollowRepository(session)

    async def explore_users(self) -> list[ExploreUser]:
        """Everyone, most repositories first, with follow counts."""
        rows = await self._users.list_with_social_counts()
        return [
            ExploreUser(
                id=user.id,
                name=user.full_name,
                username=user.username,
                bio=user.bio or f"Developer with {repositories} repositories",
                followers=followers,
                following=following,
                repositories=repositories,
            )
            for user, repositories, followers, following in rows
        ]

    async def _target(self, follower_id: uuid.UUID, username: str) -> User:
        target = await self._users.get_by_username(username)
        if target is None:
            raise ResourceNotFoundError(ErrorMessage.USER_NOT_FOUND)
        if target.id == follower_id:
            raise InvalidInputError(ErrorMessage.SELF_FOLLOW)
        return target

    async def follow(self, follower_id: uuid.UUID, username: str) -> None:
        """Raises ResourceConflictError when the edge already exists."""
        target = await self._target(follower_id, username)
        if await self._follows.exists(follower_id, target.id):
            raise ResourceConflictError(ErrorMessage.ALREADY_FOLLOWING)
        try:
            await self._follows.add(follower_id, target.id)
            await self._follows.commit()
        except ConflictError as e:
            raise ResourceConflictError(ErrorMessage.ALREADY_FOLLOWING) from e
        logger.info("User followed", follower_id=str(follower_id), following=username)

    async def unfollow(self, follower_id: uuid.UUID, username: str) -> None:
        target = await self._target(follower_id, username)
        if not await self._follows.remove(follower_id, target.id):
            raise InvalidInputError(ErrorMessage.NOT_FOLLOWING)
        await self._follows.commit()
        logger.info("User unfollowed", follower_id=str(follower_id), following=username)
