"""
Generic Request Handler

Translates one HTTP request into one repository call and renders the
standard JSON envelope `{success, data?, message?, error?, pagination?}`.
Storage failures never propagate past this layer.
"""

import logging
from typing import Any, Mapping, Optional

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaValidationError

from crud_api.common.errors import GENERIC_ERROR, AppError, NotFoundError, StorageError
from crud_api.config import Settings, get_settings
from crud_api.domain.entity import EntityDescriptor, to_public_dict
from crud_api.domain.query import (
    DEFAULT_LIMIT,
    DEFAULT_ORDER_BY,
    DEFAULT_ORDER_DIRECTION,
    Envelope,
    PaginationMeta,
    QueryOptions,
)
from crud_api.repositories.base import CrudRepository

logger = logging.getLogger(__name__)


class CrudHandler:
    """
    Generic CRUD Request Handler

    Stateless apart from the entity descriptor and settings; the repository
    is supplied per request.
    """

    def __init__(self, descriptor: EntityDescriptor, settings: Optional[Settings] = None):
        """
        Initialize Handler

        Args:
            descriptor: Entity served by this handler
            settings: Application settings (production mode hides error details)
        """
        self.descriptor = descriptor
        self.settings = settings or get_settings()

    @staticmethod
    def _respond(status_code: int, envelope: Envelope) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=envelope.render())

    def _reject(self, status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
        fields: dict[str, Any] = {"success": False, "message": message}
        if error is not None:
            fields["error"] = error
        return self._respond(status_code, Envelope(**fields))

    def _failure(self, action: str, exc: Exception) -> JSONResponse:
        """
        Render an error raised while serving a request

        Client errors keep their status; everything else becomes a 500,
        with the underlying message hidden in production.
        """
        if isinstance(exc, AppError) and exc.status_code < 500:
            return self._reject(exc.status_code, exc.message, exc.code)

        logger.error("Controller %s error for %s: %s", action, self.descriptor.label, exc, exc_info=exc)
        if self.settings.is_production:
            error = GENERIC_ERROR
        elif isinstance(exc, StorageError):
            # Driver message, e.g. the violated constraint
            error = exc.details.get("reason", exc.message)
        else:
            error = str(exc)
        return self._reject(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to {action}", error)

    def _not_found(self) -> JSONResponse:
        err = NotFoundError()
        return self._reject(err.status_code, err.message)

    @staticmethod
    def _missing_id(id: Optional[str]) -> bool:
        return id is None or not str(id).strip()

    async def create(self, repo: CrudRepository, fields: Mapping[str, Any]) -> JSONResponse:
        """Create record: 201 with the created record"""
        try:
            record = await repo.create(fields)
        except Exception as exc:
            return self._failure("create record", exc)
        return self._respond(
            status.HTTP_201_CREATED,
            Envelope(success=True, data=to_public_dict(record), message="Record created successfully"),
        )

    async def get_by_id(self, repo: CrudRepository, id: Optional[str]) -> JSONResponse:
        """Get record: 400 without ID, 404 when absent"""
        if self._missing_id(id):
            return self._reject(status.HTTP_400_BAD_REQUEST, "ID parameter is required")
        try:
            record = await repo.find_by_id(id)
        except Exception as exc:
            return self._failure("retrieve record", exc)
        if record is None:
            return self._not_found()
        return self._respond(status.HTTP_200_OK, Envelope(success=True, data=to_public_dict(record)))

    async def get_all(
        self,
        repo: CrudRepository,
        page: int = 1,
        limit: int = DEFAULT_LIMIT,
        order_by: str = DEFAULT_ORDER_BY,
        order_direction: str = DEFAULT_ORDER_DIRECTION,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> JSONResponse:
        """
        List records

        Args:
            repo: Repository of the entity
            page: 1-based page number
            limit: Page size
            order_by: Sort field
            order_direction: "ASC" or "DESC" (case-insensitive)
            filters: Equality filter built from the remaining query parameters
        """
        try:
            options = QueryOptions(
                limit=limit,
                offset=(page - 1) * limit,
                order_by=order_by,
                order_direction=order_direction.upper(),
                where=dict(filters or {}),
            )
        except SchemaValidationError as exc:
            return self._reject(status.HTTP_400_BAD_REQUEST, "Invalid query parameters", str(exc))

        try:
            result = await repo.find_all(options)
        except Exception as exc:
            return self._failure("retrieve records", exc)
        return self._respond(
            status.HTTP_200_OK,
            Envelope(
                success=True,
                data=[to_public_dict(record) for record in result.data],
                pagination=PaginationMeta(
                    page=result.page,
                    limit=result.limit,
                    total=result.total,
                    total_pages=result.total_pages,
                ),
            ),
        )

    async def update(self, repo: CrudRepository, id: Optional[str], fields: Mapping[str, Any]) -> JSONResponse:
        """Update record: 400 without ID, 404 when absent"""
        if self._missing_id(id):
            return self._reject(status.HTTP_400_BAD_REQUEST, "ID parameter is required")
        try:
            record = await repo.update(id, fields)
        except Exception as exc:
            return self._failure("update record", exc)
        if record is None:
            return self._not_found()
        return self._respond(
            status.HTTP_200_OK,
            Envelope(success=True, data=to_public_dict(record), message="Record updated successfully"),
        )

    async def delete(self, repo: CrudRepository, id: Optional[str]) -> JSONResponse:
        """Delete record: 400 without ID, 404 when absent"""
        if self._missing_id(id):
            return self._reject(status.HTTP_400_BAD_REQUEST, "ID parameter is required")
        try:
            deleted = await repo.delete(id)
        except Exception as exc:
            return self._failure("delete record", exc)
        if not deleted:
            return self._not_found()
        return self._respond(status.HTTP_200_OK, Envelope(success=True, message="Record deleted successfully"))
