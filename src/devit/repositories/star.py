import uuid

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devit.core.logging import get_logger
from devit.core.tracing import trace_database
from devit.models.star import Star
from devit.repositories.base import BaseRepository, RepositoryError


class StarRepository:
    """Star rows keyed by (user_id, repository_id)."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._base_repo = BaseRepository(session, Star)
        self._logger = get_logger(f"{__name__}.StarRepository")

    async def add(self, user_id: uuid.UUID, repository_id: uuid.UUID) -> Star:
        """Raises ConflictError when the pair already exists."""
        return await self._base_repo.create(user_id=user_id, repository_id=repository_id)

    async def commit(self) -> None:
        return await self._base_repo.commit()

    @trace_database("star_exists")
    async def exists(self, user_id: uuid.UUID, repository_id: uuid.UUID) -> bool:
        try:
            query = select(Star.user_id).where(
                Star.user_id == user_id,
                Star.repository_id == repository_id,
            )
            result = await self._session.execute(query)
            return result.first() is not None
        except SQLAlchemyError as e:
            self._logger.error("Failed to check star", error=str(e))
            raise RepositoryError(f"Failed to check star: {e}") from e

    @trace_database("remove_star")
    async def remove(self, user_id: uuid.UUID, repository_id: uuid.UUID) -> bool:
        """Delete the pair; False when there was nothing to delete."""
        try:
            result = await self._session.execute(
                delete(Star).where(
                    Star.user_id == user_id,
                    Star.repository_id == repository_id,
                )
            )
            return result.rowcount > 0
        except SQLAlchemyError as e:
            self._logger.error("Failed to remove star", error=str(e))
            raise RepositoryError(f"Failed to remove star: {e}") from e
