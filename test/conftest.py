"""
Pytest configuration and fixtures.

Tests run against an in-memory SQLite database shared through a
``StaticPool`` so every session sees the same data.
"""
from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from contact_list.config import Settings
from contact_list.contacts.models import Contact  # noqa: F401  registers tables
from contact_list.contacts.repository import ContactRepository
from contact_list.contacts.service import ContactService
from contact_list.main import create_app
from contact_list.shared.database import Base, get_db_session


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        app_env="dev",
        debug=True,
        log_level="DEBUG",
        database_url="sqlite+aiosqlite:///:memory:",
        cors_origins="http://localhost:3000",
        export_filename="contacts.csv",
    )


@pytest_asyncio.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[Any, None]:
    """Create test database engine."""
    engine = create_async_engine(
        test_settings.database_url,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: Any) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    session_factory = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
def repository(db_session: AsyncSession) -> ContactRepository:
    """Create contact repository."""
    return ContactRepository(session=db_session)


@pytest.fixture
def contact_service(db_session: AsyncSession) -> ContactService:
    """Create contact service."""
    return ContactService(session=db_session)


@pytest.fixture
def create_contact(
    contact_service: ContactService,
) -> Callable[..., Awaitable[int]]:
    """Factory persisting a contact through the service."""

    async def _create(
        name: str = "Ada Lovelace",
        phone_numbers: list[str] | None = None,
        image: str | None = None,
    ) -> int:
        return await contact_service.create(name, image, phone_numbers or [])

    return _create


@pytest.fixture
def app(test_settings: Settings, db_session: AsyncSession) -> FastAPI:
    """Application wired to the test session."""
    application = create_app(test_settings)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    application.dependency_overrides[get_db_session] = override_get_db
    return application


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API tests."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
