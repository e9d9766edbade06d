"""Engagement Counters: stars and issues with their denormalized counts.

Each operation touches a row and a counter on the repository and commits
both in one transaction. Counters move with SQL-side arithmetic, issue
numbers come from the repository's sequence column, and the unique
constraints on ``stars`` and ``issues`` back both up.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from devit.core.errors import (
    AlreadyStarredError,
    ErrorMessage,
    NotStarredError,
    ResourceNotFoundError,
    UnauthorizedError,
)
from devit.core.logging import get_logger
from devit.models.issue import Issue, IssueStateEnum
from devit.models.repository import Repository
from devit.repositories.base import ConflictError
from devit.repositories.issue import IssueRepository
from devit.repositories.repository import RepoRepository
from devit.repositories.star import StarRepository
from devit.services.directory import invalidate_explore

logger = get_logger(__name__)


class EngagementService:
    def __init__(self, session: AsyncSession, cache_client: Optional[Redis] = None) -> None:
        self._repos = RepoRepository(session)
        self._stars = StarRepository(session)
        self._issues = IssueRepository(session)
        self._cache = cache_client

    # ========================================================================
    # STARS
    # ========================================================================

    async def star(self, user_id: uuid.UUID, repository: Repository) -> None:
        """Star a repository once per user.

        Raises:
            AlreadyStarredError: If the user has already starred it, including
                when a concurrent request inserted the row first
        """
        if await self._stars.exists(user_id, repository.id):
            raise AlreadyStarredError()

        try:
            await self._stars.add(user_id, repository.id)
            await self._repos.adjust_star_count(repository.id, 1)
            await self._repos.commit()
        except ConflictError as e:
            raise AlreadyStarredError() from e

        logger.info("Repository starred", repository_id=str(repository.id), user_id=str(user_id))
        await invalidate_explore(self._cache)

    async def unstar(self, user_id: uuid.UUID, repository: Repository) -> None:
        """Raises NotStarredError if there is no star to remove."""
        if not await self._stars.remove(user_id, repository.id):
            raise NotStarredError()

        await self._repos.adjust_star_count(repository.id, -1)
        await self._repos.commit()

        logger.info("Repository unstarred", repository_id=str(repository.id), user_id=str(user_id))
        await invalidate_explore(self._cache)

    # ========================================================================
    # ISSUES
    # ========================================================================

    async def create_issue(
        self,
        repository: Repository,
        author_id: uuid.UUID,
        title: str,
        body: str = "",
    ) -> Issue:
        """Open a new issue numbered after the repository's last one."""
        number = await self._repos.next_issue_number(repository.id)
        issue = await self._issues.create(
            number=number,
            title=title,
            body=body or "",
            state=IssueStateEnum.OPEN,
            author_id=author_id,
            repository_id=repository.id,
        )
        await self._repos.adjust_open_issues_count(repository.id, 1)
        await self._issues.commit()

        logger.info(
            "Issue opened",
            repository_id=str(repository.id),
            issue_id=str(issue.id),
            number=number,
        )
        return issue

    async def list_issues(self, repository: Repository) -> list[Issue]:
        return await self._issues.list_for_repository(repository.id)

    async def get_issue(self, repository: Repository, number: int) -> Issue:
        issue = await self._issues.get_by_number(repository.id, number)
        if issue is None:
            raise ResourceNotFoundError(ErrorMessage.ISSUE_NOT_FOUND)
        return issue

    async def update_issue(
        self,
        repository: Repository,
        number: int,
        actor_id: uuid.UUID,
        title: Optional[str] = None,
        body: Optional[str] = None,
        state: Optional[IssueStateEnum] = None,
    ) -> Issue:
        """Edit an issue and move it between OPEN and CLOSED.

        Only the repository owner or the issue author may do this. A state
        change adjusts open_issues_count in the same transaction; an update
        that leaves the stored state as it was does not, even when another
        request changed it after this one loaded the issue.

        Raises:
            ResourceNotFoundError: If the issue does not exist
            UnauthorizedError: If the actor is neither owner nor author
        """
        issue = await self.get_issue(repository, number)
        if actor_id not in (repository.owner_id, issue.author_id):
            raise UnauthorizedError(ErrorMessage.ISSUE_FORBIDDEN)

        if title is not None:
            issue.title = title
        if body is not None:
            issue.body = body

        await self._issues.save(issue)

        delta = 0
        if state is not None:
            closing = state == IssueStateEnum.CLOSED
            closed_at = datetime.now(timezone.utc) if closing else None
            if await self._issues.transition_state(issue, state, closed_at):
                delta = -1 if closing else 1

        if delta:
            await self._repos.adjust_open_issues_count(repository.id, delta)
        await self._issues.commit()

        logger.info(
            "Issue updated",
            repository_id=str(repository.id),
            number=number,
            state=issue.state.value,
            open_issues_delta=delta,
        )
        return issue
