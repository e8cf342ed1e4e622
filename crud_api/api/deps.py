"""
API Dependency Injection Module

Provides the dependencies required by FastAPI routes.
"""

from typing import Annotated

from fastapi import Depends, Request

from crud_api.db.session import Database


def get_database(request: Request) -> Database:
    """
    Get the application's Database

    The Database is created by `create_app` and stored on `app.state`.

    Returns:
        Database: Database resource owning the connection pool
    """
    return request.app.state.database


# Dependency type aliases
DatabaseDep = Annotated[Database, Depends(get_database)]
