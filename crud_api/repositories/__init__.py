"""
Data Access Layer Module Initialization
"""

from crud_api.repositories.base import CrudRepository, RecordId

__all__ = [
    "CrudRepository",
    "RecordId",
]
