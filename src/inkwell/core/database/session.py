"""Async database connection lifecycle.

The application owns a single ``Database`` handle created by the app
factory. It is connected in the FastAPI lifespan and disconnected on
shutdown; request handlers receive sessions through ``get_db``.
"""

from collections.abc import AsyncGenerator
from typing import Any

import structlog
from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from inkwell.core.errors import ServiceUnavailableError


logger = structlog.get_logger()


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    # SQLite ignores ON DELETE rules unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Explicit database handle with connect/disconnect lifecycle.

    Usage:
        database = Database(settings.async_database_url)
        await database.connect()
        async with database.session() as session:
            ...
        await database.disconnect()
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        echo: bool = False,
    ) -> None:
        self.url = url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_connected(self) -> bool:
        """Whether an engine is currently open."""
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise ServiceUnavailableError(
                "Database is not connected",
                error_code="database_unavailable",
            )
        return self._engine

    async def connect(self) -> None:
        """Create the engine and verify connectivity.

        Calling connect on an already connected handle is a no-op.
        """
        if self._engine is not None:
            logger.info("database_already_connected")
            return

        engine_kwargs: dict[str, object] = {
            "echo": self.echo,
            "pool_pre_ping": True,
        }
        if not self.url.startswith("sqlite"):
            engine_kwargs["pool_size"] = self.pool_size
            engine_kwargs["max_overflow"] = self.max_overflow

        engine = create_async_engine(self.url, **engine_kwargs)
        if engine.dialect.name == "sqlite":
            event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            await engine.dispose()
            logger.exception("database_connect_failed")
            raise

        self._engine = engine
        self._session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("database_connected", dialect=engine.dialect.name)

    async def disconnect(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("database_disconnected")

    async def ping(self) -> bool:
        """Run a trivial query to check the connection is usable."""
        if self._engine is None:
            return False
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning("database_ping_failed", error=str(e))
            return False
        return True

    def session(self) -> AsyncSession:
        """Open a new session bound to this database."""
        if self._session_factory is None:
            raise ServiceUnavailableError(
                "Database is not connected",
                error_code="database_unavailable",
            )
        return self._session_factory()


def get_database(request: Request) -> Database:
    """Return the database handle owned by the running application."""
    return request.app.state.database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a transactional database session.

    Usage:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    database = get_database(request)
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
