"""Base repository class with generic CRUD operations.

This module implements a composition-based repository pattern that provides
reusable database access operations (CRUD) for any SQLAlchemy model.

Key Concepts:
- COMPOSITION PATTERN: BaseRepository is injected as a dependency, not inherited
- GENERIC TYPE SAFETY: Uses TypeVar[ModelType] for compile-time type checking
- TRANSACTION SUPPORT: Writes only flush; the caller commits once per operation
- TRACING: @trace_database decorators integrate with OpenTelemetry

Usage Example:
    from sqlalchemy.ext.asyncio import AsyncSession
    from devit.models.user import User

    session: AsyncSession
    repo = BaseRepository(session, User)
    user = await repo.get(user_id)
    new_user = await repo.create(username="octocat", email="octo@example.com", ...)
    await repo.update(user_id, full_name="The Octocat")
    await repo.commit()

See devit/repositories/user.py for an example of composition pattern usage.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar, Union

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase

from devit.core.logging import get_logger
from devit.core.tracing import trace_database

ModelType = TypeVar("ModelType", bound=DeclarativeBase)

EntityId = Union[uuid.UUID, str, int]

logger = get_logger(__name__)


# ============================================================================
# CUSTOM EXCEPTION HIERARCHY
# ============================================================================


class RepositoryError(Exception):
    """Base exception for all repository operations.

    Raised when database operations fail. ConflictError inherits from this
    so the service layer can tell constraint violations apart.
    """
    pass


class ConflictError(RepositoryError):
    """Raised when a write violates a unique, primary key or check constraint."""
    pass


def write_error(e: SQLAlchemyError, action: str) -> RepositoryError:
    """Translate a failed write into the repository exception hierarchy."""
    if isinstance(e, IntegrityError):
        return ConflictError(f"{action} conflicts with existing data: {e.orig}")
    return RepositoryError(f"Failed to {action.lower()}: {e}")


# ============================================================================
# PAGINATION SUPPORT
# ============================================================================


class PaginationParams:
    """Offset/limit pagination parameters.

    Limit is capped at 1000 so a single request cannot pull a whole table.

    Raises:
        ValueError: If offset is negative or limit is out of range
    """

    def __init__(self, offset: int = 0, limit: int = 50) -> None:
        if offset < 0:
            raise ValueError("Offset must be non-negative")
        if limit <= 0 or limit > 1000:
            raise ValueError("Limit must be between 1 and 1000")

        self.offset = offset
        self.limit = limit


# ============================================================================
# BASE REPOSITORY - MAIN CRUD IMPLEMENTATION
# ============================================================================


class BaseRepository(Generic[ModelType]):
    """Generic repository providing CRUD operations for any SQLAlchemy model.

    Entity repositories inject BaseRepository as a dependency (composition)
    instead of inheriting from it.

    Args:
        session: AsyncSession for database communication
        model: SQLAlchemy model class (e.g., User, Repository)

    Example (Composition Pattern):
        class UserRepository:
            def __init__(self, session: AsyncSession) -> None:
                self._base_repo = BaseRepository(session, User)

            async def get(self, user_id: uuid.UUID) -> Optional[User]:
                return await self._base_repo.get(user_id)
    """

    def __init__(self, session: AsyncSession, model: type[ModelType]) -> None:
        self._session = session
        self._model = model
        self._logger = get_logger(f"{__name__}.{model.__name__}Repository")

    # ========================================================================
    # CREATE OPERATION
    # ========================================================================

    @trace_database()
    async def create(self, **kwargs: Any) -> ModelType:
        """Create a new entity and return it.

        Adds the entity to the session and flushes to obtain generated values
        without committing the transaction.

        Raises:
            ConflictError: If creation violates a constraint
            RepositoryError: For other database errors
        """
        try:
            self._logger.debug("Creating new entity", model=self._model.__name__)

            entity = self._model(**kwargs)

            self._session.add(entity)
            await self._session.flush()
            await self._session.refresh(entity)

            self._logger.info(
                "Entity created successfully",
                model=self._model.__name__,
                entity_id=getattr(entity, 'id', None)
            )

            return entity

        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to create entity",
                model=self._model.__name__,
                error=str(e)
            )
            # A failed flush leaves the session unusable until rolled back
            await self._session.rollback()
            raise write_error(e, "Create entity") from e

    # ========================================================================
    # READ OPERATIONS (GET)
    # ========================================================================

    @trace_database()
    async def get(self, entity_id: EntityId) -> Optional[ModelType]:
        """Get entity by primary key ``id``; None if absent.

        Raises:
            RepositoryError: For database errors
        """
        try:
            self._logger.debug(
                "Getting entity by ID",
                model=self._model.__name__,
                entity_id=entity_id,
            )

            query = select(self._model).where(getattr(self._model, 'id') == entity_id)
            result = await self._session.execute(query)
            entity = result.unique().scalar_one_or_none()

            self._logger.debug(
                "Entity found" if entity else "Entity not found",
                model=self._model.__name__,
                entity_id=entity_id
            )

            return entity

        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to get entity",
                model=self._model.__name__,
                entity_id=entity_id,
                error=str(e)
            )
            raise RepositoryError(f"Failed to get entity: {e}") from e

    # ========================================================================
    # UPDATE OPERATION
    # ========================================================================

    @trace_database()
    async def update(self, entity_id: EntityId, **kwargs: Any) -> Optional[ModelType]:
        """Update entity by ID and return it, or None if not found.

        Automatically stamps updated_at when the model has that column.

        Raises:
            ConflictError: If the update violates a constraint
            RepositoryError: For other database errors
        """
        try:
            self._logger.debug(
                "Updating entity",
                model=self._model.__name__,
                entity_id=entity_id,
                fields=list(kwargs.keys())
            )

            if hasattr(self._model, 'updated_at'):
                kwargs['updated_at'] = datetime.now(timezone.utc)

            query = (
                update(self._model)
                .where(getattr(self._model, 'id') == entity_id)
                .values(**kwargs)
                .returning(self._model)
            )

            result = await self._session.execute(query)
            entity = result.scalar_one_or_none()

            if entity:
                self._logger.info(
                    "Entity updated successfully",
                    model=self._model.__name__,
                    entity_id=entity_id
                )
            else:
                self._logger.debug(
                    "Entity not found for update",
                    model=self._model.__name__,
                    entity_id=entity_id
                )

            return entity

        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to update entity",
                model=self._model.__name__,
                entity_id=entity_id,
                error=str(e)
            )
            raise write_error(e, "Update entity") from e

    # ========================================================================
    # COUNT OPERATION
    # ========================================================================

    @trace_database()
    async def count(self) -> int:
        """Count all rows of the model.

        Raises:
            RepositoryError: For database errors
        """
        try:
            query = select(func.count()).select_from(self._model)
            result = await self._session.execute(query)
            return result.scalar() or 0

        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to count entities",
                model=self._model.__name__,
                error=str(e)
            )
            raise RepositoryError(f"Failed to count entities: {e}") from e

    # ========================================================================
    # TRANSACTION MANAGEMENT
    # ========================================================================

    async def commit(self) -> None:
        """Commit the current transaction.

        Persists every pending change made through this session, including
        those made via other repositories sharing it.

        Raises:
            ConflictError: If a deferred constraint fails at commit
            RepositoryError: If commit fails
        """
        try:
            await self._session.commit()
            self._logger.debug("Transaction committed", model=self._model.__name__)
        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to commit transaction",
                model=self._model.__name__,
                error=str(e)
            )
            await self._session.rollback()
            raise write_error(e, "Commit transaction") from e

    async def rollback(self) -> None:
        """Rollback the current transaction.

        Raises:
            RepositoryError: If rollback fails
        """
        try:
            await self._session.rollback()
            self._logger.debug("Transaction rolled back", model=self._model.__name__)
        except SQLAlchemyError as e:
            self._logger.error(
                "Failed to rollback transaction",
                model=self._model.__name__,
                error=str(e)
            )
            raise RepositoryError(f"Failed to rollback transaction: {e}") from e
