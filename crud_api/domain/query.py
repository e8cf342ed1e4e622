"""
Query Domain Model

Listing parameters, paginated results and the JSON response envelope.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

OrderDirection = Literal["ASC", "DESC"]

DEFAULT_LIMIT = 10
DEFAULT_ORDER_BY = "created_at"
DEFAULT_ORDER_DIRECTION: OrderDirection = "DESC"


class QueryOptions(BaseModel):
    """Structured listing parameters (pagination, sort, equality filter)"""

    limit: int = Field(DEFAULT_LIMIT, gt=0, description="Page size")
    offset: int = Field(0, ge=0, description="Rows to skip")
    order_by: str = Field(DEFAULT_ORDER_BY, description="Sort field")
    order_direction: OrderDirection = Field(DEFAULT_ORDER_DIRECTION, description="Sort direction")
    where: dict[str, Any] = Field(default_factory=dict, description="Equality filter")


class PaginatedResult(BaseModel, Generic[T]):
    """One page of records plus pagination metadata"""

    data: list[T]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, data: list[T], total: int, options: QueryOptions) -> "PaginatedResult[T]":
        """Derive page number and page count from the query options"""
        return cls(
            data=data,
            total=total,
            page=options.offset // options.limit + 1,
            limit=options.limit,
            total_pages=math.ceil(total / options.limit),
        )


@dataclass
class FindFilter:
    """
    Raw query directives

    For listings QueryOptions cannot express: multi-column ordering,
    unbounded results, eager loading of relationships.
    """

    where: dict[str, Any] = field(default_factory=dict)
    # (field, "ASC" | "DESC") pairs applied in order
    order: list[tuple[str, str]] = field(default_factory=list)
    limit: Optional[int] = None
    offset: Optional[int] = None
    # Relationship attribute names loaded eagerly
    include: list[str] = field(default_factory=list)


class PaginationMeta(BaseModel):
    """Pagination block of the response envelope"""

    page: int
    limit: int
    total: int
    total_pages: int = Field(..., serialization_alias="totalPages")

    model_config = ConfigDict(populate_by_name=True)


class Envelope(BaseModel):
    """
    Standard JSON Response Envelope

    `success` is always present; the other fields only when set.
    """

    success: bool
    data: Any = None
    message: Optional[str] = None
    error: Optional[str] = None
    pagination: Optional[PaginationMeta] = None

    def render(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True, by_alias=True)
