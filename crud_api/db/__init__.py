"""
Database Module Initialization
"""

from crud_api.db.models import Base, EntityMixin, User
from crud_api.db.session import Database

__all__ = [
    "Base",
    "Database",
    "EntityMixin",
    "User",
]
