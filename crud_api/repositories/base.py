"""
Base Repository Interface Module

Defines the generic interface for data access, decoupling request handling from specific database implementations.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, Optional, Sequence, TypeVar, Union

from crud_api.domain.query import FindFilter, PaginatedResult, QueryOptions

# Define generic type variable
T = TypeVar("T")

RecordId = Union[str, uuid.UUID]


class CrudRepository(ABC, Generic[T]):
    """
    Generic CRUD Repository Interface

    One instance serves one entity type. All operations raise StorageError
    when the database fails.
    """

    @abstractmethod
    async def create(self, fields: Mapping[str, Any]) -> T:
        """
        Create a record

        Args:
            fields: Entity fields; `id` is generated when absent, timestamps are ignored

        Returns:
            T: Created record
        """
        pass

    @abstractmethod
    async def find_by_id(self, id: RecordId) -> Optional[T]:
        """Get record by ID, None when absent"""
        pass

    @abstractmethod
    async def find_all(self, options: Optional[QueryOptions] = None) -> PaginatedResult[T]:
        """
        Get one page of records

        Args:
            options: Pagination, sort and equality filter (defaults: 10 newest records)

        Returns:
            PaginatedResult[T]: Page of records and pagination metadata
        """
        pass

    @abstractmethod
    async def update(self, id: RecordId, fields: Mapping[str, Any]) -> Optional[T]:
        """
        Merge fields into a record

        Returns:
            Optional[T]: Updated record, None when absent
        """
        pass

    @abstractmethod
    async def delete(self, id: RecordId) -> bool:
        """Delete record, True if a row was removed"""
        pass

    @abstractmethod
    async def find_one(self, criteria: Mapping[str, Any]) -> Optional[T]:
        """Get first record matching criteria"""
        pass

    @abstractmethod
    async def exists(self, criteria: Mapping[str, Any]) -> bool:
        """Check whether any record matches criteria"""
        pass

    @abstractmethod
    async def bulk_create(self, records: Sequence[Mapping[str, Any]]) -> list[T]:
        """Create several records, in input order"""
        pass

    @abstractmethod
    async def find_with_filter(self, filter: FindFilter) -> list[T]:
        """Get records using raw sort/limit/offset/include directives"""
        pass

    @abstractmethod
    async def count(self, criteria: Optional[Mapping[str, Any]] = None) -> int:
        """Count records matching criteria (all records by default)"""
        pass

    @abstractmethod
    async def find_or_create(
        self,
        criteria: Mapping[str, Any],
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> tuple[T, bool]:
        """
        Get the record matching criteria, creating it when absent

        Args:
            criteria: Equality criteria, also used as initial field values
            defaults: Extra field values used only on creation

        Returns:
            tuple[T, bool]: (Record, whether it was created)
        """
        pass
