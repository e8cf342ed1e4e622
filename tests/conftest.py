"""
Test Configuration Module
"""

from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import Engine, create_engine

from crud_api.config import Settings
from crud_api.db.session import Database
from crud_api.entities import USER_ENTITY
from crud_api.main import create_app
from crud_api.repositories.sqlalchemy import SQLAlchemyCrudRepository


@pytest.fixture
def settings() -> Settings:
    """Development settings isolated from the environment's .env file"""
    return Settings(_env_file=None, ENVIRONMENT="development", DATABASE_TYPE="sqlite")


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """
    File-backed SQLite database

    A file (not :memory:) so that concurrent sessions see the same data.
    """
    db = Database.from_url(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.create_all()

    yield db

    await db.dispose()


@pytest.fixture
def user_repo(database) -> SQLAlchemyCrudRepository:
    return SQLAlchemyCrudRepository(USER_ENTITY, database.session_factory)


@pytest_asyncio.fixture
async def client(settings, database) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to an app owning the test database"""
    app = create_app(settings, database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def side_engine(database) -> Generator[Engine, None, None]:
    """Synchronous engine on the same SQLite file, acting as a concurrent client"""
    engine = create_engine(database.engine.url.set(drivername="sqlite"))

    yield engine

    engine.dispose()
