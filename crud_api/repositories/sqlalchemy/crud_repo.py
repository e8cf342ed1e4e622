"""
Generic CRUD Repository SQLAlchemy Implementation

Provides database operations for any entity described by an EntityDescriptor.
"""

import asyncio
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Mapping, Optional, Sequence

from sqlalchemy import Select, func, inspect, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from crud_api.common.errors import StorageError, ValidationError
from crud_api.common.time import next_timestamp, to_utc_naive
from crud_api.db.models import SERVER_ASSIGNED_COLUMNS
from crud_api.domain.entity import EntityDescriptor, EntityRead
from crud_api.domain.query import FindFilter, PaginatedResult, QueryOptions
from crud_api.repositories.base import CrudRepository, RecordId

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


class SQLAlchemyCrudRepository(CrudRepository[EntityRead]):
    """
    Generic CRUD Repository SQLAlchemy Implementation

    Every operation opens its own session from the factory, so concurrent
    operations (including the read/count pair of find_all) never share a session.
    """

    def __init__(
        self,
        descriptor: EntityDescriptor,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        """
        Initialize Repository

        Args:
            descriptor: Entity served by this repository
            session_factory: Async session factory
        """
        self.descriptor = descriptor
        self.model = descriptor.model
        self.session_factory = session_factory

    # ============ Helpers ============

    @contextmanager
    def _storage_errors(self, action: str) -> Iterator[None]:
        """Log database failures and re-raise them as StorageError"""
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error("Error %s %s record: %s", action, self.descriptor.label, exc)
            raise StorageError(
                message=f"Error {action} {self.descriptor.label} record",
                details={"reason": str(exc)},
            ) from exc

    def _column(self, name: str):
        if name not in self.descriptor.columns:
            raise ValidationError(
                message=f"Unknown field '{name}' for {self.descriptor.label}",
                code="unknown_field",
            )
        return getattr(self.model, name)

    def _coerce(self, name: str, value: Any) -> Any:
        """Convert text values (query strings, JSON) to the column's Python type"""
        if not isinstance(value, str):
            return value
        try:
            python_type = self.model.__table__.c[name].type.python_type
        except NotImplementedError:
            return value
        if python_type is str:
            return value
        try:
            if python_type is bool:
                lowered = value.strip().lower()
                if lowered in _TRUE_VALUES:
                    return True
                if lowered in _FALSE_VALUES:
                    return False
                raise ValueError(value)
            if python_type is datetime:
                return to_utc_naive(datetime.fromisoformat(value))
            return python_type(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                message=f"Invalid value for field '{name}': {value!r}",
                code="invalid_value",
            ) from exc

    def _where(self, criteria: Optional[Mapping[str, Any]]) -> list:
        conditions = []
        for name, value in (criteria or {}).items():
            column = self._column(name)
            value = self._coerce(name, value)
            conditions.append(column.is_(None) if value is None else column == value)
        return conditions

    def _values(self, fields: Mapping[str, Any], allow_id: bool) -> dict[str, Any]:
        """Validate payload fields, dropping server-assigned columns"""
        values = {}
        for name, value in fields.items():
            if name in SERVER_ASSIGNED_COLUMNS or (name == "id" and not allow_id):
                continue
            self._column(name)
            values[name] = self._coerce(name, value)
        if values.get("id") is None:
            values.pop("id", None)
        return values

    @staticmethod
    def _parse_id(id: RecordId) -> Optional[uuid.UUID]:
        if isinstance(id, uuid.UUID):
            return id
        try:
            return uuid.UUID(str(id))
        except ValueError:
            return None

    def _order(self, name: str, direction: str):
        column = self._column(name)
        direction = direction.upper()
        if direction not in ("ASC", "DESC"):
            raise ValidationError(
                message=f"Invalid sort direction '{direction}'",
                code="invalid_order_direction",
            )
        return column.asc() if direction == "ASC" else column.desc()

    async def _fetch(self, query: Select) -> list[EntityRead]:
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [self.descriptor.to_read(e) for e in result.scalars().all()]

    async def _count(self, conditions: list) -> int:
        query = select(func.count()).select_from(self.model).where(*conditions)
        async with self.session_factory() as session:
            result = await session.execute(query)
            return result.scalar() or 0

    # ============ Operations ============

    async def create(self, fields: Mapping[str, Any]) -> EntityRead:
        """Create record"""
        entity = self.model(**self._values(fields, allow_id=True))
        with self._storage_errors("creating"):
            async with self.session_factory() as session:
                session.add(entity)
                await session.commit()
                await session.refresh(entity)
                record = self.descriptor.to_read(entity)
        logger.info("Created %s record with ID: %s", self.descriptor.label, record.id)
        return record

    async def find_by_id(self, id: RecordId) -> Optional[EntityRead]:
        """Get record by ID"""
        key = self._parse_id(id)
        if key is None:
            return None
        with self._storage_errors("finding"):
            async with self.session_factory() as session:
                entity = await session.get(self.model, key)
                return self.descriptor.to_read(entity) if entity else None

    async def find_all(self, options: Optional[QueryOptions] = None) -> PaginatedResult[EntityRead]:
        """Get one page of records"""
        options = options or QueryOptions()
        conditions = self._where(options.where)
        query = (
            select(self.model)
            .where(*conditions)
            .order_by(self._order(options.order_by, options.order_direction), self.model.id)
            .offset(options.offset)
            .limit(options.limit)
        )
        # Page and total are read concurrently, possibly from different snapshots
        with self._storage_errors("finding"):
            data, total = await asyncio.gather(self._fetch(query), self._count(conditions))
        return PaginatedResult.build(data, total, options)

    async def update(self, id: RecordId, fields: Mapping[str, Any]) -> Optional[EntityRead]:
        """Update record, the ID is never changed"""
        values = self._values(fields, allow_id=False)
        key = self._parse_id(id)
        if key is None:
            return None
        with self._storage_errors("updating"):
            async with self.session_factory() as session:
                entity = await session.get(self.model, key)
                if entity is None:
                    return None
                for name, value in values.items():
                    setattr(entity, name, value)
                entity.updated_at = next_timestamp(entity.updated_at)
                try:
                    await session.commit()
                except StaleDataError:
                    # Row deleted between read and write
                    logger.warning("%s record %s disappeared during update", self.descriptor.label, key)
                    return None
                await session.refresh(entity)
                record = self.descriptor.to_read(entity)
        logger.info("Updated %s record with ID: %s", self.descriptor.label, key)
        return record

    async def delete(self, id: RecordId) -> bool:
        """Delete record"""
        key = self._parse_id(id)
        if key is None:
            return False
        with self._storage_errors("deleting"):
            async with self.session_factory() as session:
                entity = await session.get(self.model, key)
                if entity is None:
                    return False
                await session.delete(entity)
                await session.commit()
        logger.info("Deleted %s record with ID: %s", self.descriptor.label, key)
        return True

    async def find_one(self, criteria: Mapping[str, Any]) -> Optional[EntityRead]:
        """Get first record matching criteria"""
        query = select(self.model).where(*self._where(criteria)).limit(1)
        with self._storage_errors("finding"):
            records = await self._fetch(query)
        return records[0] if records else None

    async def exists(self, criteria: Mapping[str, Any]) -> bool:
        """Check record existence"""
        return await self.count(criteria) > 0

    async def bulk_create(self, records: Sequence[Mapping[str, Any]]) -> list[EntityRead]:
        """Create records in one transaction"""
        if not records:
            return []
        entities = [self.model(**self._values(fields, allow_id=True)) for fields in records]
        with self._storage_errors("bulk creating"):
            async with self.session_factory() as session:
                session.add_all(entities)
                await session.commit()
                created = [self.descriptor.to_read(e) for e in entities]
        logger.info("Bulk created %d %s records", len(created), self.descriptor.label)
        return created

    async def find_with_filter(self, filter: FindFilter) -> list[EntityRead]:
        """Get records using raw query directives"""
        query = select(self.model).where(*self._where(filter.where))
        for name, direction in filter.order:
            query = query.order_by(self._order(name, direction))
        if filter.offset is not None:
            query = query.offset(filter.offset)
        if filter.limit is not None:
            query = query.limit(filter.limit)
        relationships = inspect(self.model).relationships
        for name in filter.include:
            if name not in relationships:
                raise ValidationError(
                    message=f"Unknown relationship '{name}' for {self.descriptor.label}",
                    code="unknown_relationship",
                )
            query = query.options(selectinload(getattr(self.model, name)))
        with self._storage_errors("finding"):
            return await self._fetch(query)

    async def count(self, criteria: Optional[Mapping[str, Any]] = None) -> int:
        """Count records"""
        conditions = self._where(criteria)
        with self._storage_errors("counting"):
            return await self._count(conditions)

    async def find_or_create(
        self,
        criteria: Mapping[str, Any],
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> tuple[EntityRead, bool]:
        """Get matching record or create it from criteria and defaults"""
        conditions = self._where(criteria)
        values = self._values({**(defaults or {}), **criteria}, allow_id=True)
        query = select(self.model).where(*conditions).limit(1)
        with self._storage_errors("finding or creating"):
            async with self.session_factory() as session:
                existing = (await session.execute(query)).scalars().first()
                if existing is not None:
                    return self.descriptor.to_read(existing), False

                entity = self.model(**values)
                session.add(entity)
                try:
                    await session.commit()
                except IntegrityError:
                    # A concurrent insert won the race, return its row
                    await session.rollback()
                    existing = (await session.execute(query)).scalars().first()
                    if existing is None:
                        raise
                    return self.descriptor.to_read(existing), False
                await session.refresh(entity)
                record = self.descriptor.to_read(entity)
        logger.info("Created new %s record with ID: %s", self.descriptor.label, record.id)
        return record, True
