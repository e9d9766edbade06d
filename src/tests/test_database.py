"""Test database connection management and session handling."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from devit.core.database import (
    DBErrorMessage,
    async_session_maker,
    check_database_connection,
    close_database,
    create_engine,
    engine,
    get_db,
)


def _mock_session_maker() -> tuple[MagicMock, AsyncMock]:
    session = AsyncMock(spec=AsyncSession)
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return MagicMock(return_value=session), session


def _mock_begin(mock_engine: MagicMock, **enter: object) -> AsyncMock:
    conn = AsyncMock()
    context = AsyncMock()
    context.__aenter__ = AsyncMock(return_value=conn, **enter)
    context.__aexit__ = AsyncMock(return_value=None)
    mock_engine.begin = MagicMock(return_value=context)
    return conn


class TestCreateEngine:
    """Test create_engine() function."""

    def test_create_engine_passes_pool_settings(self) -> None:
        with patch("devit.core.database.settings") as mock_settings:
            mock_settings.database_url = "postgresql+asyncpg://devit:secret@db/devit"
            mock_settings.database_pool_size = 20
            mock_settings.database_max_overflow = 10

            with patch("devit.core.database.create_async_engine") as mock_create:
                result = create_engine()

                assert result is mock_create.return_value
                kwargs = mock_create.call_args[1]
                assert kwargs["pool_size"] == 20
                assert kwargs["max_overflow"] == 10
                assert kwargs["pool_pre_ping"] is True
                assert kwargs["pool_recycle"] == 3600

    @pytest.mark.parametrize(
        ("url", "pool_size", "max_overflow", "message"),
        [
            ("", 20, 10, DBErrorMessage.CREATE_ENGINE_NO_URL),
            ("sqlite+aiosqlite:///./x.db", 0, 10, DBErrorMessage.CREATE_ENGINE_MIN_DB_POOL_SIZE),
            ("sqlite+aiosqlite:///./x.db", 5, -1, DBErrorMessage.CREATE_ENGINE_NEGATIVE_MAX_OVERFLOW),
        ],
    )
    def test_create_engine_rejects_bad_config(
        self, url: str, pool_size: int, max_overflow: int, message: str
    ) -> None:
        with patch("devit.core.database.settings") as mock_settings:
            mock_settings.database_url = url
            mock_settings.database_pool_size = pool_size
            mock_settings.database_max_overflow = max_overflow

            with pytest.raises(ValueError, match=message):
                create_engine()

    def test_create_engine_driver_error_masked(self) -> None:
        with patch("devit.core.database.settings") as mock_settings:
            mock_settings.database_url = "postgresql+asyncpg://db/devit"
            mock_settings.database_pool_size = 20
            mock_settings.database_max_overflow = 10

            with patch("devit.core.database.create_async_engine") as mock_create:
                mock_create.side_effect = RuntimeError("driver exploded")

                with pytest.raises(ValueError, match=DBErrorMessage.CREATE_ENGINE_FAILED):
                    create_engine()


class TestCheckDatabaseConnection:
    """Test check_database_connection() function."""

    @pytest.mark.asyncio
    async def test_check_connection_success(self) -> None:
        with patch("devit.core.database.engine") as mock_engine:
            conn = _mock_begin(mock_engine)

            assert await check_database_connection() is True
            conn.execute.assert_called_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [ConnectionError("refused"), TimeoutError("timeout"), Exception("unexpected")],
    )
    async def test_check_connection_failure(self, error: Exception) -> None:
        with patch("devit.core.database.engine") as mock_engine:
            _mock_begin(mock_engine, side_effect=error)

            assert await check_database_connection() is False


class TestGetDb:
    """Test get_db() async generator dependency."""

    @pytest.mark.asyncio
    async def test_get_db_yields_one_session(self) -> None:
        maker, session = _mock_session_maker()

        with patch("devit.core.database.async_session_maker", maker):
            async for db in get_db():
                assert db is session
                break

            maker.assert_called_once()

    @pytest.mark.asyncio
    async def test_get_db_rolls_back_and_reraises_handler_errors(self) -> None:
        maker, session = _mock_session_maker()

        with patch("devit.core.database.async_session_maker", maker):
            generator = get_db()
            await generator.__anext__()

            with pytest.raises(KeyError):
                await generator.athrow(KeyError("boom"))

            session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_db_wraps_database_errors(self) -> None:
        maker, session = _mock_session_maker()

        with patch("devit.core.database.async_session_maker", maker):
            generator = get_db()
            await generator.__anext__()

            with pytest.raises(RuntimeError, match=DBErrorMessage.SESSION_FAILED):
                await generator.athrow(OperationalError("SELECT 1", {}, Exception("gone")))

            session.rollback.assert_awaited_once()


class TestCloseDatabase:
    """Test close_database() function."""

    @pytest.mark.asyncio
    async def test_close_database_disposes_engine(self) -> None:
        with patch("devit.core.database.engine") as mock_engine:
            mock_engine.dispose = AsyncMock()

            await close_database()

            mock_engine.dispose.assert_called_once()

    @pytest.mark.asyncio
    async def test_close_database_failure(self) -> None:
        with patch("devit.core.database.engine") as mock_engine:
            mock_engine.dispose = AsyncMock(side_effect=ConnectionError("Already disconnected"))

            with pytest.raises(RuntimeError, match=DBErrorMessage.CLOSE_DATABASE_FAILED):
                await close_database()


class TestEngineInitialization:
    """Test that engine is properly initialized at module load."""

    def test_engine_instance_created(self) -> None:
        assert isinstance(engine, AsyncEngine)

    def test_async_session_maker_created(self) -> None:
        assert async_session_maker.kw.get("expire_on_commit") is False
        assert async_session_maker.kw.get("autoflush") is False
        assert isinstance(async_session_maker.kw.get("bind"), AsyncEngine)
