import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devit.core.logging import get_logger
from devit.core.tracing import trace_database
from devit.models.issue import Issue, IssueStateEnum
from devit.repositories.base import BaseRepository, RepositoryError, write_error


class IssueRepository:
    """Repository for Issue entities using composition pattern."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._base_repo = BaseRepository(session, Issue)
        self._logger = get_logger(f"{__name__}.IssueRepository")

    async def create(self, **kwargs: Any) -> Issue:
        """Insert an issue. The number must already be reserved.

        Raises:
            ConflictError: If the number is already used in the repository
            RepositoryError: For other database errors
        """
        return await self._base_repo.create(**kwargs)

    async def count(self) -> int:
        return await self._base_repo.count()

    async def commit(self) -> None:
        return await self._base_repo.commit()

    @trace_database("get_issue_by_number")
    async def get_by_number(self, repository_id: uuid.UUID, number: int) -> Optional[Issue]:
        try:
            query = select(Issue).where(
                Issue.repository_id == repository_id,
                Issue.number == number,
            )
            result = await self._session.execute(query)
            return result.unique().scalar_one_or_none()
        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to get issue",
                repository_id=str(repository_id),
                number=number,
                error=str(e),
            )
            raise RepositoryError(f"Failed to get issue: {e}") from e

    @trace_database("list_issues")
    async def list_for_repository(self, repository_id: uuid.UUID) -> list[Issue]:
        """All issues of a repository, newest number first."""
        try:
            query = (
                select(Issue)
                .where(Issue.repository_id == repository_id)
                .order_by(Issue.number.desc())
            )
            result = await self._session.execute(query)
            return list(result.unique().scalars().all())
        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to list issues",
                repository_id=str(repository_id),
                error=str(e),
            )
            raise RepositoryError(f"Failed to list issues: {e}") from e

    @trace_database("transition_issue_state")
    async def transition_state(
        self,
        issue: Issue,
        state: IssueStateEnum,
        closed_at: Optional[datetime],
    ) -> bool:
        """Move an issue into ``state`` unless the stored row is already there.

        The check runs against the database row, not the loaded object, so of
        two concurrent identical transitions exactly one reports True. The
        issue is refreshed afterwards to reflect whichever writer won.
        """
        try:
            result = await self._session.execute(
                update(Issue)
                .where(Issue.id == issue.id, Issue.state != state)
                .values(state=state, closed_at=closed_at)
                .execution_options(synchronize_session=False)
            )
            await self._session.refresh(issue)
            return result.rowcount == 1
        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to change issue state",
                issue_id=str(issue.id),
                state=state.value,
                error=str(e),
            )
            raise write_error(e, "Change issue state") from e

    async def save(self, issue: Issue) -> Issue:
        """Flush in-place changes made to a loaded issue."""
        try:
            await self._session.flush()
            return issue
        except SQLAlchemyError as e:
            self._logger.error("Failed to save issue", issue_id=str(issue.id), error=str(e))
            await self._session.rollback()
            raise write_error(e, "Save issue") from e
