"""
Database engine and session management with async SQLAlchemy.
"""

from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from contact_list.config import Settings, get_settings
from contact_list.shared.logging import get_logger

logger = get_logger(__name__)

# MySQL truncates GROUP_CONCAT output at 1024 bytes by default
GROUP_CONCAT_MAX_LEN = 1024 * 1024


class Base(DeclarativeBase):
    """Declarative base for ORM models."""


def _raise_group_concat_limit(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute(f"SET SESSION group_concat_max_len = {GROUP_CONCAT_MAX_LEN}")
    cursor.close()


class DatabaseManager:
    """Owns the engine (connection pool) and the session factory."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize database manager.

        Args:
            settings: Optional settings override.
        """
        self._settings = settings or get_settings()
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def _engine_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "echo": self._settings.sql_echo,
            "pool_pre_ping": True,
        }
        # SQLite uses its own pool implementations
        if not self._settings.database_url.startswith("sqlite"):
            options.update(pool_size=5, max_overflow=10)
        return options

    @property
    def engine(self) -> AsyncEngine:
        """Get or create the database engine."""
        if self._engine is None:
            self._engine = create_async_engine(
                self._settings.database_url,
                **self._engine_options(),
            )
            if self._settings.database_url.startswith("mysql"):
                event.listen(self._engine.sync_engine, "connect", _raise_group_concat_limit)
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session; transactions are owned by the service layer."""
        async with self.session_factory() as session:
            yield session

    async def create_all(self) -> None:
        """Create missing tables for all registered models."""
        # Register models on Base.metadata
        import contact_list.contacts.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def close(self) -> None:
        """Close the database engine."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions.

    The manager lives on ``app.state`` so its lifecycle follows the
    application lifespan.
    """
    db_manager: DatabaseManager = request.app.state.db_manager
    async for session in db_manager.get_session():
        yield session


__all__ = [
    "Base",
    "DatabaseManager",
    "get_db_session",
]
