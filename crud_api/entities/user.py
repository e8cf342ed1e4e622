"""
User Entity

Wires the User model and DTOs into the generic CRUD layers.
"""

from typing import Optional

from crud_api.api.routes import CrudRoutes
from crud_api.config import Settings
from crud_api.db.models import User as UserORM
from crud_api.domain.entity import EntityDescriptor
from crud_api.domain.user import User, UserCreate, UserUpdate

USER_ENTITY = EntityDescriptor(
    name="users",
    model=UserORM,
    read_schema=User,
    create_schema=UserCreate,
    update_schema=UserUpdate,
    tags=("User",),
)


def user_routes(settings: Optional[Settings] = None) -> CrudRoutes:
    """Standard CRUD routes for users, mounted under /users"""
    return CrudRoutes(USER_ENTITY, settings=settings)
