"""
Configuration Management Module

Configures application parameters via environment variables or .env file.
Supports PostgreSQL (default) and SQLite databases.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

# Storage variables that must be non-empty unless DATABASE_URL is given
REQUIRED_DATABASE_SETTINGS = (
    "DATABASE_HOST",
    "DATABASE_PORT",
    "DATABASE_NAME",
    "DATABASE_USER",
    "DATABASE_PASSWORD",
)


class Settings(BaseSettings):
    """
    Application Configuration Class

    All configuration items can be overridden by environment variables, with names matching fields (uppercase).
    """

    # Application Config
    APP_NAME: str = "API Template"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: Literal["development", "production"] = "development"

    # Server Config
    HOST: str = "localhost"
    PORT: int = 3000
    # Comma-separated list of allowed origins
    CORS_ORIGIN: str = "http://localhost:3000"

    # Database Config
    # Supports "postgresql" or "sqlite"
    DATABASE_TYPE: Literal["postgresql", "sqlite"] = "postgresql"
    # Full connection string, overrides the individual parts below when set
    DATABASE_URL: Optional[str] = None
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: Optional[int] = 5432
    DATABASE_NAME: str = "api_template"
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = "password"

    # Connection Pool Config
    DATABASE_MAX_CONNECTIONS: int = 20
    # Time to wait for a connection (ms)
    DATABASE_CONNECTION_TIMEOUT: int = 2000
    # Time before an idle connection is recycled (ms)
    DATABASE_IDLE_TIMEOUT: int = 30000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGIN.split(",") if origin.strip()]

    @property
    def database_url(self) -> URL:
        """
        SQLAlchemy connection URL

        Built from the DATABASE_* parts (asyncpg driver) unless DATABASE_URL is set.
        """
        if self.DATABASE_URL:
            return make_url(self.DATABASE_URL)
        if self.DATABASE_TYPE == "sqlite":
            return URL.create("sqlite+aiosqlite", database=f"./{self.DATABASE_NAME}.db")
        return URL.create(
            "postgresql+asyncpg",
            username=self.DATABASE_USER,
            password=self.DATABASE_PASSWORD,
            host=self.DATABASE_HOST,
            port=self.DATABASE_PORT,
            database=self.DATABASE_NAME,
        )

    def missing_database_settings(self) -> list[str]:
        """
        Return the names of required storage settings that are empty

        Returns:
            list[str]: Missing variable names (empty when the configuration is usable)
        """
        if self.DATABASE_URL or self.DATABASE_TYPE == "sqlite":
            return []
        return [name for name in REQUIRED_DATABASE_SETTINGS if not getattr(self, name)]

    def database_info(self) -> dict[str, object]:
        """Database connection summary without credentials"""
        url = self.database_url
        return {
            "type": url.get_backend_name(),
            "host": url.host,
            "port": url.port,
            "database": url.database,
            "user": url.username,
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Get application configuration (Singleton)

    Uses lru_cache to ensure configuration is loaded only once.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
