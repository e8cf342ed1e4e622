"""
User Domain Model

Defines User related Data Transfer Objects (DTOs).
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field

from crud_api.domain.entity import EntityRead


class UserBase(BaseModel):
    """User Base Model"""

    # Display Name
    name: str = Field("Unknown", min_length=1, max_length=255, description="User Name")
    # Email, unique across users
    email: str = Field(..., min_length=3, max_length=255, description="Email")


class UserCreate(UserBase):
    """Create User Request Model"""

    # Generated by the server when omitted
    id: Optional[uuid.UUID] = Field(None, description="User ID")


class UserUpdate(BaseModel):
    """Update User Request Model (All fields optional)"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, min_length=3, max_length=255)


class User(UserBase, EntityRead):
    """User Complete Model"""
    pass
