"""
Entity Registry

Every entity exposed by the API, in mount order.
"""

from crud_api.entities.user import USER_ENTITY, user_routes

ENTITY_ROUTES = [
    user_routes,
]

__all__ = [
    "ENTITY_ROUTES",
    "USER_ENTITY",
    "user_routes",
]
