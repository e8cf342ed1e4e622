"""
Domain Model Module Initialization
"""

from crud_api.domain.entity import EntityDescriptor, EntityRead, to_public_dict
from crud_api.domain.query import (
    Envelope,
    FindFilter,
    PaginatedResult,
    PaginationMeta,
    QueryOptions,
)
from crud_api.domain.user import User, UserCreate, UserUpdate

__all__ = [
    # Entity
    "EntityDescriptor",
    "EntityRead",
    "to_public_dict",
    # Query
    "Envelope",
    "FindFilter",
    "PaginatedResult",
    "PaginationMeta",
    "QueryOptions",
    # User
    "User",
    "UserCreate",
    "UserUpdate",
]
