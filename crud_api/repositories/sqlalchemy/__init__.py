"""
SQLAlchemy Repository Implementation Module Initialization
"""

from crud_api.repositories.sqlalchemy.crud_repo import SQLAlchemyCrudRepository

__all__ = [
    "SQLAlchemyCrudRepository",
]
