"""
SQLAlchemy ORM Model Definitions

Defines the database table structures:
- EntityMixin: universal columns shared by every entity (id, created_at, updated_at)
- users: Users Table
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from crud_api.common.time import utc_now_naive

# Columns assigned by the server, never taken from client payloads
SERVER_ASSIGNED_COLUMNS = frozenset({"created_at", "updated_at"})


class Base(DeclarativeBase):
    """SQLAlchemy ORM Base Class"""
    pass


class EntityMixin:
    """
    Universal Entity Columns

    Every persisted entity gets an immutable UUID primary key and
    server-assigned creation/update timestamps (naive UTC).
    """

    # Primary Key, generated when the client does not supply one
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Creation Time
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now_naive, nullable=False
    )
    # Update Time
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now_naive, nullable=False
    )


class User(EntityMixin, Base):
    """
    Users Table

    Demonstration entity persisted through the generic CRUD layers.
    """
    __tablename__ = "users"

    # Display Name
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="Unknown")
    # Email, unique
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
