"""
Error Definitions

Defines custom exception classes used in the application for unified error handling.
Every error renders to the standard response envelope:
`{"success": false, "message": ..., "error": ...}`.
"""

from typing import Any, Optional

# Message returned to clients in production instead of internal details
GENERIC_ERROR = "Internal server error"


class AppError(Exception):
    """
    Application Base Exception

    Base class for all custom exceptions, containing error message, type, code and HTTP status.
    """

    def __init__(
        self,
        message: str,
        error_type: str = "app_error",
        code: str = "internal_error",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ):
        """
        Initialize exception

        Args:
            message: Error message
            error_type: Error type
            code: Error code
            details: Extra error details
            status_code: HTTP status code
        """
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.code = code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self, include_details: bool = True) -> dict[str, Any]:
        """
        Convert to response envelope

        Args:
            include_details: Whether to expose `details` to the client

        Returns:
            dict: Envelope with `success` set to False
        """
        result: dict[str, Any] = {
            "success": False,
            "message": self.message,
            "error": self.code,
        }
        if include_details and self.details:
            result["details"] = self.details
        return result


class ValidationError(AppError):
    """
    Parameter Validation Error

    Raised when a required path parameter is missing or a request names an unknown field.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        code: str = "validation_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="validation_error",
            code=code,
            details=details,
            status_code=400,
        )


class NotFoundError(AppError):
    """
    Resource Not Found Error

    Raised when the requested record or route does not exist.
    """

    def __init__(
        self,
        message: str = "Record not found",
        code: str = "not_found",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="not_found_error",
            code=code,
            details=details,
            status_code=404,
        )


class StorageError(AppError):
    """
    Storage Error

    Raised by the data-access layer when the database fails
    (connectivity, constraint violation, query error).
    """

    def __init__(
        self,
        message: str = "Storage operation failed",
        code: str = "storage_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="storage_error",
            code=code,
            details=details,
            status_code=500,
        )
