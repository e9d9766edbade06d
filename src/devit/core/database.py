"""Database connection management with async SQLAlchemy."""

from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from devit.core.config import settings
from devit.core.logging import get_logger
from devit.core.tracing import trace_database

logger = get_logger(__name__)


class DBErrorMessage:
    """Standardized database error messages."""
    CREATE_ENGINE_NO_URL = "DATABASE_URL is not configured"
    CREATE_ENGINE_MIN_DB_POOL_SIZE = "DATABASE_POOL_SIZE must be at least 1"
    CREATE_ENGINE_NEGATIVE_MAX_OVERFLOW = "DATABASE_MAX_OVERFLOW must be non-negative"
    CREATE_ENGINE_FAILED = "Failed to create database engine"

    SESSION_FAILED = "Database session failed"
    CLOSE_DATABASE_FAILED = "Failed to close database connections"


def create_engine() -> AsyncEngine:
    """Create the process-wide AsyncEngine with a bounded connection pool.

    Pool configuration:
        - pool_size / max_overflow: from settings, bound concurrent connections
        - pool_pre_ping: test connections before handing them out
        - pool_recycle: recycle connections after one hour

    Raises:
        ValueError: If the database URL is missing or pool settings are invalid
    """
    try:
        if not settings.database_url:
            raise ValueError(DBErrorMessage.CREATE_ENGINE_NO_URL)

        if settings.database_pool_size < 1:
            raise ValueError(DBErrorMessage.CREATE_ENGINE_MIN_DB_POOL_SIZE)

        if settings.database_max_overflow < 0:
            raise ValueError(DBErrorMessage.CREATE_ENGINE_NEGATIVE_MAX_OVERFLOW)

        logger.info(
            "Creating async database engine",
            url=settings.database_url.split("@")[1] if "@" in settings.database_url else "***",
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )

        return create_async_engine(
            settings.database_url,
            echo=False,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
    except ValueError:
        raise
    except Exception as e:
        logger.error(f"Failed to create database engine, due to configuration error: {e}")
        raise ValueError(DBErrorMessage.CREATE_ENGINE_FAILED) from e


engine: AsyncEngine = create_engine()

async_session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request.

    Services commit explicitly at the end of a mutating operation; anything
    still pending when the handler raises is rolled back here, so a request's
    writes land together or not at all.

    Raises:
        RuntimeError: If the session fails with a database error outside the handler
    """
    async with async_session_maker() as session:
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Database session error occurred", error=str(e))
            raise RuntimeError(DBErrorMessage.SESSION_FAILED) from e
        except Exception:
            await session.rollback()
            raise


@trace_database("health_check")
async def check_database_connection() -> bool:
    """Check if database connection is available.

    Returns:
        bool: True if connection successful, False otherwise
    """
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.debug("Database connection check passed")
        return True
    except Exception as e:
        logger.error(f"Database connection check failed with error: {e}")
        return False


async def close_database() -> None:
    """Dispose the engine's pool. Called during application shutdown.

    Raises:
        RuntimeError: If graceful shutdown fails
    """
    try:
        logger.info("Closing database connections")
        await engine.dispose()
    except Exception as e:
        logger.error(f"Error closing database connections: {e}")
        raise RuntimeError(DBErrorMessage.CLOSE_DATABASE_FAILED) from e
