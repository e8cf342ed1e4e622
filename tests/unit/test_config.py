"""
Test Configuration and Startup Checks
"""

from unittest.mock import MagicMock

import pytest

from crud_api import main
from crud_api.config import Settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("DATABASE_URL", "DATABASE_TYPE", "ENVIRONMENT", "PORT", "CORS_ORIGIN"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.ENVIRONMENT == "development"
    assert settings.is_development is True
    assert settings.is_production is False
    assert settings.PORT == 3000
    assert settings.cors_origins == ["http://localhost:3000"]


def test_database_url_built_from_parts():
    settings = Settings(
        _env_file=None,
        DATABASE_HOST="db.internal",
        DATABASE_PORT=6543,
        DATABASE_NAME="crud",
        DATABASE_USER="svc",
        DATABASE_PASSWORD="s3cret",
    )

    url = settings.database_url
    assert url.drivername == "postgresql+asyncpg"
    assert url.host == "db.internal"
    assert url.port == 6543
    assert url.database == "crud"
    assert url.username == "svc"
    assert url.password == "s3cret"


def test_database_url_override_and_info():
    settings = Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite:///./local.db")

    assert settings.database_url.drivername == "sqlite+aiosqlite"
    assert settings.missing_database_settings() == []
    assert settings.database_info()["type"] == "sqlite"


def test_database_info_hides_password():
    info = Settings(_env_file=None, DATABASE_PASSWORD="s3cret").database_info()

    assert "s3cret" not in str(info)
    assert info["type"] == "postgresql"
    assert info["database"] == "api_template"


def test_missing_database_settings():
    settings = Settings(_env_file=None, DATABASE_HOST="", DATABASE_PASSWORD="")

    assert settings.missing_database_settings() == ["DATABASE_HOST", "DATABASE_PASSWORD"]


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("CORS_ORIGIN", "https://a.example.com, https://b.example.com")

    settings = Settings(_env_file=None)

    assert settings.is_production is True
    assert settings.PORT == 8080
    assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]


def test_run_exits_when_database_settings_missing(monkeypatch):
    settings = Settings(_env_file=None, DATABASE_USER="")
    server = MagicMock()
    monkeypatch.setattr(main, "get_settings", lambda: settings)
    monkeypatch.setattr(main.uvicorn, "run", server)

    with pytest.raises(SystemExit) as exc_info:
        main.run()

    assert exc_info.value.code == 1
    server.assert_not_called()


def test_run_starts_server_with_app_factory(monkeypatch):
    settings = Settings(_env_file=None, HOST="0.0.0.0", PORT=8000, ENVIRONMENT="production")
    server = MagicMock()
    monkeypatch.setattr(main, "get_settings", lambda: settings)
    monkeypatch.setattr(main.uvicorn, "run", server)

    main.run()

    server.assert_called_once()
    args, kwargs = server.call_args
    assert args == ("crud_api.main:create_app",)
    assert kwargs["factory"] is True
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 8000
    assert kwargs["reload"] is False
