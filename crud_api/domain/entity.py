"""
Entity Domain Model

Describes a persisted entity to the generic CRUD layers and defines the
read model fields shared by every entity.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import inspect

from crud_api.common.time import ensure_utc
from crud_api.db.models import EntityMixin

# Fields never returned to clients
SECRET_FIELDS = frozenset({"password", "token"})


class EntityRead(BaseModel):
    """Universal read model fields"""

    id: uuid.UUID = Field(..., description="Record ID")
    created_at: datetime = Field(..., description="Creation Time")
    updated_at: datetime = Field(..., description="Update Time")

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


@dataclass(frozen=True)
class EntityDescriptor:
    """
    Entity Descriptor

    Everything the generic repository, handler and routes need to serve one
    entity: the ORM model, its pydantic schemas and the name it is mounted under.

    Attributes:
        name: Entity name, also the mount path (e.g. "users")
        model: ORM class carrying the universal columns
        read_schema: Read model returned to callers
        create_schema: Request body for creation
        update_schema: Request body for partial updates
        tags: OpenAPI tags
    """

    name: str
    model: type[EntityMixin]
    read_schema: type[EntityRead]
    create_schema: type[BaseModel]
    update_schema: type[BaseModel]
    tags: tuple[str, ...] = field(default=())

    @property
    def columns(self) -> frozenset[str]:
        """Persisted field names"""
        return frozenset(attr.key for attr in inspect(self.model).column_attrs)

    @property
    def label(self) -> str:
        """Model name used in log messages"""
        return self.model.__name__

    def to_read(self, entity: EntityMixin) -> EntityRead:
        """Convert ORM entity to read model"""
        return self.read_schema.model_validate(entity)


def to_public_dict(record: BaseModel) -> dict[str, Any]:
    """
    Serialize a read model for API responses

    Secret fields (password, token) are dropped.
    """
    return record.model_dump(mode="json", exclude=set(SECRET_FIELDS))
