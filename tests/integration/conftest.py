"""Integration test fixtures backed by a real PostgreSQL database.

The schema is brought to head with Alembic before each test. Every fixture
that creates rows removes them again on teardown.
"""

import asyncio
from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from src.authhub.core import db
from src.authhub.core.config import get_settings
from src.authhub.core.db import run_migrations_sync
from src.authhub.models import Tenancy
from tests.factories import ProjectFactory, TenancyFactory
from tests.utils import cleanup_project, cleanup_tenancy_cascade


@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Create test database engine and ensure migrations are applied."""
    await db.dispose_engine()

    settings = get_settings()
    test_engine = create_async_engine(settings.database_url, poolclass=NullPool)

    await asyncio.to_thread(run_migrations_sync)

    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Provide an async session. Tests commit explicitly."""
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def db_tenancy(engine: AsyncEngine, db_session: AsyncSession) -> AsyncGenerator[Tenancy]:
    """Create an isolated project and tenancy for each test."""
    project = ProjectFactory.build()
    tenancy = TenancyFactory.build(project_id=project.id)
    db_session.add(project)
    await db_session.flush()
    db_session.add(tenancy)
    await db_session.commit()

    yield tenancy

    async with engine.connect() as conn:
        await cleanup_tenancy_cascade(conn, tenancy.id)
        await cleanup_project(conn, project.id)
        await conn.commit()
