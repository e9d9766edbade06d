"""Data access for code repositories and their denormalized counters."""

import uuid
from typing import Any, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devit.core.logging import get_logger
from devit.core.tracing import trace_database
from devit.models.issue import Issue
from devit.models.repository import Repository
from devit.models.star import Star
from devit.models.user import User
from devit.repositories.base import BaseRepository, RepositoryError, write_error


class RepoRepository:
    """Repository for Repository entities using composition pattern.

    Counter columns are only ever changed with SQL-side arithmetic
    (``star_count = star_count + 1``) so concurrent writers never lose an
    update. The in-session object is kept in step by evaluating the same
    expression in Python.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._base_repo = BaseRepository(session, Repository)
        self._logger = get_logger(f"{__name__}.RepoRepository")

    # ========================================================================
    # DELEGATED CRUD METHODS
    # ========================================================================

    async def create(self, **kwargs: Any) -> Repository:
        """Create a new repository.

        Raises:
            ConflictError: If the owner already has a repository with this name
            RepositoryError: For other database errors
        """
        return await self._base_repo.create(**kwargs)

    async def get(self, repository_id: uuid.UUID) -> Optional[Repository]:
        return await self._base_repo.get(repository_id)

    async def count(self) -> int:
        return await self._base_repo.count()

    async def commit(self) -> None:
        return await self._base_repo.commit()

    # ========================================================================
    # LOOKUPS AND LISTINGS
    # ========================================================================

    @trace_database("get_repository_by_owner_and_name")
    async def get_by_owner_and_name(
        self, owner_id: uuid.UUID, name: str
    ) -> Optional[Repository]:
        try:
            query = select(Repository).where(
                Repository.owner_id == owner_id,
                Repository.name == name,
            )
            result = await self._session.execute(query)
            return result.unique().scalar_one_or_none()
        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to get repository",
                owner_id=str(owner_id),
                name=name,
                error=str(e),
            )
            raise RepositoryError(f"Failed to get repository: {e}") from e

    @trace_database("get_repository_by_owner_username")
    async def get_by_owner_username_and_name(
        self, username: str, name: str
    ) -> Optional[Repository]:
        try:
            query = (
                select(Repository)
                .join(User, Repository.owner_id == User.id)
                .where(User.username == username, Repository.name == name)
            )
            result = await self._session.execute(query)
            return result.unique().scalar_one_or_none()
        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to get repository",
                owner=username,
                name=name,
                error=str(e),
            )
            raise RepositoryError(f"Failed to get repository: {e}") from e

    @trace_database("list_repositories_by_owner")
    async def list_by_owner_with_counts(
        self, owner_id: uuid.UUID
    ) -> list[tuple[Repository, int, int]]:
        """Owner's repositories, most recently updated first.

        Each row carries the live star count and the live issue count
        (all states) computed from the child tables.
        """
        stars = (
            select(func.count())
            .select_from(Star)
            .where(Star.repository_id == Repository.id)
            .correlate(Repository)
            .scalar_subquery()
        )
        issues = (
            select(func.count(Issue.id))
            .where(Issue.repository_id == Repository.id)
            .correlate(Repository)
            .scalar_subquery()
        )
        try:
            query = (
                select(Repository, stars, issues)
                .where(Repository.owner_id == owner_id)
                .order_by(Repository.updated_at.desc())
            )
            result = await self._session.execute(query)
            return [(repo, star_total, issue_total) for repo, star_total, issue_total in result.unique().all()]
        except SQLAlchemyError as e:
            self._logger.error("Failed to list repositories", owner_id=str(owner_id), error=str(e))
            raise RepositoryError(f"Failed to list repositories: {e}") from e

    @trace_database("list_public_repositories")
    async def list_public(self) -> list[Repository]:
        """Public repositories, most starred first, newest breaking ties."""
        try:
            query = (
                select(Repository)
                .where(Repository.is_private.is_(False))
                .order_by(Repository.star_count.desc(), Repository.created_at.desc())
            )
            result = await self._session.execute(query)
            return list(result.unique().scalars().all())
        except SQLAlchemyError as e:
            self._logger.error("Failed to list public repositories", error=str(e))
            raise RepositoryError(f"Failed to list public repositories: {e}") from e

    # ========================================================================
    # COUNTERS
    # ========================================================================

    async def _adjust(self, repository_id: uuid.UUID, column: str, delta: int) -> None:
        # Counter moves are not edits of the repository: updated_at stays put.
        attr = getattr(Repository, column)
        try:
            query = (
                update(Repository)
                .where(Repository.id == repository_id)
                .values({attr: attr + delta, Repository.updated_at: Repository.updated_at})
                .execution_options(synchronize_session="evaluate")
            )
            await self._session.execute(query)
        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to adjust repository counter",
                repository_id=str(repository_id),
                column=column,
                error=str(e),
            )
            raise write_error(e, f"Adjust {column}") from e

    @trace_database("adjust_star_count")
    async def adjust_star_count(self, repository_id: uuid.UUID, delta: int) -> None:
        await self._adjust(repository_id, "star_count", delta)

    @trace_database("adjust_open_issues_count")
    async def adjust_open_issues_count(self, repository_id: uuid.UUID, delta: int) -> None:
        await self._adjust(repository_id, "open_issues_count", delta)

    @trace_database("next_issue_number")
    async def next_issue_number(self, repository_id: uuid.UUID) -> int:
        """Reserve the next issue number for a repository.

        A single UPDATE ... RETURNING so two concurrent creators can never
        be handed the same number.
        """
        try:
            query = (
                update(Repository)
                .where(Repository.id == repository_id)
                .values(issue_sequence=Repository.issue_sequence + 1)
                .returning(Repository.issue_sequence)
                .execution_options(synchronize_session="evaluate")
            )
            result = await self._session.execute(query)
            number = result.scalar_one()
            self._logger.debug(
                "Issue number reserved",
                repository_id=str(repository_id),
                number=number,
            )
            return number
        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to reserve issue number",
                repository_id=str(repository_id),
                error=str(e),
            )
            raise write_error(e, "Reserve issue number") from e

    # ========================================================================
    # DELETE
    # ========================================================================

    @trace_database("delete_repository")
    async def delete_with_dependents(self, repository: Repository) -> None:
        """Delete a repository together with its issues and stars."""
        try:
            await self._session.execute(
                delete(Issue).where(Issue.repository_id == repository.id)
            )
            await self._session.execute(
                delete(Star).where(Star.repository_id == repository.id)
            )
            await self._session.delete(repository)
            await self._session.flush()
            self._logger.info(
                "Repository deleted",
                repository_id=str(repository.id),
                name=repository.name,
            )
        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to delete repository",
                repository_id=str(repository.id),
                error=str(e),
            )
            raise RepositoryError(f"Failed to delete repository: {e}") from e
