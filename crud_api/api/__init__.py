"""
API Module Initialization
"""

from crud_api.api.deps import DatabaseDep, get_database
from crud_api.api.handlers import CrudHandler
from crud_api.api.routes import CrudRoutes

__all__ = [
    "CrudHandler",
    "CrudRoutes",
    "DatabaseDep",
    "get_database",
]
