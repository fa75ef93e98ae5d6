"""Common test fixtures for strategy analyser tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from backend.strategy_analyser.app.dependencies import get_session
from backend.strategy_analyser.app.main import create_app
from backend.strategy_analyser.db.base import (
    Base,
    create_engine,
    create_session,
    dispose_engine,
)


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Return a SQLite database URL located in a temporary directory."""

    db_path = tmp_path_factory.mktemp("strategy-analyser-db") / "test.sqlite3"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture(scope="session")
async def db_engine(db_url: str) -> AsyncIterator[AsyncEngine]:
    """Initialise the global async engine used by the tests."""

    engine = create_engine(db_url, echo=False)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await dispose_engine()


@pytest_asyncio.fixture(autouse=True)
async def clean_database(db_engine: AsyncEngine) -> AsyncIterator[None]:
    """Remove every persisted row after each test case."""

    yield

    async with db_engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            await connection.execute(table.delete())


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Yield an :class:`AsyncSession` bound to the test database."""

    session = create_session()
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> Callable[[], AsyncSession]:
    """Provide a helper to create fresh async sessions on demand."""

    def factory() -> AsyncSession:
        return create_session()

    return factory


@pytest.fixture
def app(db_session: AsyncSession):
    """Create a FastAPI test application with database overrides."""

    application = create_app()

    async def _override_session():
        yield db_session

    application.dependency_overrides[get_session] = _override_session
    return application
