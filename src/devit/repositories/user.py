import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devit.core.logging import get_logger
from devit.core.tracing import trace_database
from devit.models.follow import Follow
from devit.models.repository import Repository
from devit.models.user import User
from devit.repositories.base import (
    BaseRepository,
    PaginationParams,
    RepositoryError,
)

logger = get_logger(__name__)


def _repository_count():
    return (
        select(func.count(Repository.id))
        .where(Repository.owner_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )


class UserRepository:
    """Repository for User entities using composition pattern.

    Standard CRUD operations are delegated to BaseRepository[User]; lookups
    by the unique columns and the aggregate listings used by the explore
    page and the admin console live here.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._base_repo = BaseRepository(session, User)
        self._logger = get_logger(f"{__name__}.UserRepository")

    # ========================================================================
    # DELEGATED CRUD METHODS
    # ========================================================================

    async def create(self, **kwargs: Any) -> User:
        """Create a new user.

        Raises:
            ConflictError: If username or email is already taken
            RepositoryError: For other database errors
        """
        return await self._base_repo.create(**kwargs)

    async def get(self, user_id: Union[uuid.UUID, str]) -> Optional[User]:
        return await self._base_repo.get(user_id)

    async def count(self) -> int:
        return await self._base_repo.count()

    async def commit(self) -> None:
        return await self._base_repo.commit()

    # ========================================================================
    # CUSTOM USER METHODS
    # ========================================================================

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self._get_by(User.email, email)

    async def get_by_username(self, username: str) -> Optional[User]:
        return await self._get_by(User.username, username)

    async def _get_by(self, column: Any, value: str) -> Optional[User]:
        try:
            result = await self._session.execute(select(User).where(column == value))
            user = result.scalar_one_or_none()
            self._logger.debug(
                "User lookup",
                field=column.key,
                found=user is not None,
            )
            return user
        except SQLAlchemyError as e:
            self._logger.error("Failed to look up user", field=column.key, error=str(e))
            raise RepositoryError(f"Failed to get user by {column.key}: {e}") from e

    async def touch_last_active(self, user_id: uuid.UUID) -> Optional[User]:
        """Record a successful sign-in."""
        return await self._base_repo.update(
            user_id, last_active_at=datetime.now(timezone.utc)
        )

    @trace_database("list_users_with_repository_counts")
    async def list_with_repository_counts(
        self, pagination: Optional[PaginationParams] = None
    ) -> tuple[list[tuple[User, int]], int]:
        """Page through users newest first, each with its repository count.

        Returns:
            (rows, total) where rows are (user, repository_count) pairs
        """
        pagination = pagination or PaginationParams()
        try:
            query = (
                select(User, _repository_count())
                .order_by(User.created_at.desc())
                .offset(pagination.offset)
                .limit(pagination.limit)
            )
            result = await self._session.execute(query)
            rows = [(user, count) for user, count in result.all()]
            total = await self._base_repo.count()
            return rows, total
        except SQLAlchemyError as e:
            self._logger.error("Failed to list users", error=str(e))
            raise RepositoryError(f"Failed to list users: {e}") from e

    @trace_database("list_users_with_social_counts")
    async def list_with_social_counts(self) -> list[tuple[User, int, int, int]]:
        """Every user with (repositories, followers, following) counts,
        most repositories first."""
        followers = (
            select(func.count())
            .select_from(Follow)
            .where(Follow.following_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        following = (
            select(func.count())
            .select_from(Follow)
            .where(Follow.follower_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        repositories = _repository_count()
        try:
            query = (
                select(User, repositories, followers, following)
                .order_by(repositories.desc(), User.created_at.desc())
            )
            result = await self._session.execute(query)
            return [tuple(row) for row in result.all()]  # type: ignore[misc]
        except SQLAlchemyError as e:
            self._logger.error("Failed to list users with social counts", error=str(e))
            raise RepositoryError(f"Failed to list users: {e}") from e
