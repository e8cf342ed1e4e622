"""
Common Utilities Module Initialization
"""

from crud_api.common.errors import (
    AppError,
    NotFoundError,
    StorageError,
    ValidationError,
)

__all__ = [
    "AppError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
]
