import uuid

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devit.core.logging import get_logger
from devit.core.tracing import trace_database
from devit.models.follow import Follow
from devit.repositories.base import BaseRepository, RepositoryError


class FollowRepository:
    """Directed follow edges between users."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._base_repo = BaseRepository(session, Follow)
        self._logger = get_logger(f"{__name__}.FollowRepository")

    async def add(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> Follow:
        """Raises ConflictError for a duplicate edge or a self-follow."""
        return await self._base_repo.create(follower_id=follower_id, following_id=following_id)

    async def commit(self) -> None:
        return await self._base_repo.commit()

    @trace_database("follow_exists")
    async def exists(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> bool:
        try:
            query = select(Follow.follower_id).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
            result = await self._session.execute(query)
            return result.first() is not None
        except SQLAlchemyError as e:
            self._logger.error("Failed to check follow", error=str(e))
            raise RepositoryError(f"Failed to check follow: {e}") from e

    @trace_database("remove_follow")
    async def remove(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> bool:
        try:
            result = await self._session.execute(
                delete(Follow).where(
                    Follow.follower_id == follower_id,
                    Follow.following_id == following_id,
                )
            )
            return result.rowcount > 0
        except SQLAlchemyError as e:
            self._logger.error("Failed to remove follow", error=str(e))
            raise RepositoryError(f"Failed to remove follow: {e}") from e
