"""
Database Session Management Module

Provides the `Database` resource owning the async engine and session factory.
The application creates one instance at startup and disposes it on shutdown.
"""

import logging
from typing import Union

from sqlalchemy import event, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from crud_api.config import Settings
from crud_api.db.models import Base

logger = logging.getLogger(__name__)


class Database:
    """
    Database Resource

    Wraps an AsyncEngine and its session factory. Sessions are opened per
    operation via `session_factory`.
    """

    def __init__(self, engine: AsyncEngine):
        """
        Initialize Database

        Args:
            engine: Async database engine
        """
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Do not expire objects after commit, avoids extra queries
            autoflush=False,
        )

    @classmethod
    def from_url(cls, url: Union[str, URL], **engine_kwargs) -> "Database":
        """Create a Database for a connection URL"""
        engine = create_async_engine(url, **engine_kwargs)
        if engine.dialect.name == "sqlite":
            _enable_sqlite_foreign_keys(engine)
        return cls(engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """
        Create a Database from application settings

        Applies pool sizing and timeouts for PostgreSQL; production
        connections require TLS.
        """
        url = settings.database_url
        if url.get_backend_name() == "sqlite":
            return cls.from_url(url, connect_args={"check_same_thread": False})

        connect_args: dict = {
            "timeout": settings.DATABASE_CONNECTION_TIMEOUT / 1000,
        }
        if settings.is_production:
            connect_args["ssl"] = "require"
        return cls.from_url(
            url,
            pool_size=settings.DATABASE_MAX_CONNECTIONS,
            max_overflow=0,
            pool_timeout=settings.DATABASE_CONNECTION_TIMEOUT / 1000,
            pool_recycle=settings.DATABASE_IDLE_TIMEOUT / 1000,
            pool_pre_ping=True,
            connect_args=connect_args,
        )

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    async def verify_connection(self) -> bool:
        """
        Check that the database is reachable

        Returns:
            bool: True when a trivial query succeeds
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Database connection failed (%s): %s", self.dialect, exc)
            return False
        logger.info("Database connection successful (%s)", self.dialect)
        return True

    async def create_all(self, drop_first: bool = False) -> None:
        """
        Create all entity tables

        Args:
            drop_first: Drop existing tables before creating them (destroys data)

        Note:
            In production, using Alembic for database migration is recommended.
        """
        async with self.engine.begin() as conn:
            if drop_first:
                await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database synced%s (%s)", " (forced)" if drop_first else "", self.dialect)

    async def dispose(self) -> None:
        """Close all pooled connections"""
        await self.engine.dispose()
        logger.info("Database connection closed")


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
