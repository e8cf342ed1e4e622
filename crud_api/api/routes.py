"""
Generic CRUD Routes

Binds the fixed CRUD route table of one entity to a CrudHandler.
"""

from typing import Annotated, Callable, Optional, Sequence

from fastapi import APIRouter, Body, Depends, Query, Request, status

from crud_api.api.deps import DatabaseDep
from crud_api.api.handlers import CrudHandler
from crud_api.config import Settings
from crud_api.domain.entity import EntityDescriptor
from crud_api.domain.query import DEFAULT_LIMIT, DEFAULT_ORDER_BY, DEFAULT_ORDER_DIRECTION, Envelope
from crud_api.repositories.base import CrudRepository
from crud_api.repositories.sqlalchemy import SQLAlchemyCrudRepository

# Query parameters consumed by pagination; all others become equality filters
LIST_PARAMS = frozenset({"page", "limit", "orderBy", "orderDirection"})

RouteRegistrar = Callable[[APIRouter, "CrudRoutes"], None]

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": Envelope, "description": "Missing or invalid parameter"},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": Envelope, "description": "Storage failure"},
}
_NOT_FOUND_RESPONSE = {
    status.HTTP_404_NOT_FOUND: {"model": Envelope, "description": "Record not found"},
}


class CrudRoutes:
    """
    Generic CRUD Route Registrar

    Builds an APIRouter mounted under `/<entity name>` with:

        POST   /        create
        GET    /        list (paginated)
        GET    /{id}    get by ID
        PATCH  /{id}    partial update
        DELETE /{id}    delete

    Entity-specific routes are added through `extra_routes` or by overriding
    `add_custom_routes`; they are registered first so fixed paths are not
    captured by `/{id}`.
    """

    def __init__(
        self,
        descriptor: EntityDescriptor,
        handler: Optional[CrudHandler] = None,
        settings: Optional[Settings] = None,
        extra_routes: Sequence[RouteRegistrar] = (),
    ):
        """
        Initialize Routes

        Args:
            descriptor: Entity to expose
            handler: Request handler (defaults to a CrudHandler for the descriptor)
            settings: Application settings passed to the default handler
            extra_routes: Callables registering additional routes on the router
        """
        self.descriptor = descriptor
        self.handler = handler or CrudHandler(descriptor, settings)
        self.router = APIRouter(
            prefix=self.prefix,
            tags=list(descriptor.tags) or [descriptor.label],
        )
        self.add_custom_routes(self.router)
        for register in extra_routes:
            register(self.router, self)
        self._setup_routes()

    @property
    def entity_name(self) -> str:
        return self.descriptor.name

    @property
    def prefix(self) -> str:
        return f"/{self.descriptor.name}"

    def get_router(self) -> APIRouter:
        return self.router

    def get_repository(self, database: DatabaseDep) -> CrudRepository:
        """Repository dependency bound to the application's Database"""
        return SQLAlchemyCrudRepository(self.descriptor, database.session_factory)

    def add_custom_routes(self, router: APIRouter) -> None:
        """Override to register entity-specific routes"""
        pass

    def _setup_routes(self) -> None:
        handler = self.handler
        label = self.descriptor.label
        create_schema = self.descriptor.create_schema
        update_schema = self.descriptor.update_schema
        Repo = Annotated[CrudRepository, Depends(self.get_repository)]

        @self.router.post(
            "",
            response_model=Envelope,
            status_code=status.HTTP_201_CREATED,
            responses=_ERROR_RESPONSES,
            summary=f"Create a {label}",
        )
        async def create(repo: Repo, data: create_schema = Body(...)):  # type: ignore[valid-type]
            return await handler.create(repo, data.model_dump(exclude_unset=True))

        @self.router.get(
            "",
            response_model=Envelope,
            responses=_ERROR_RESPONSES,
            summary=f"List {label} records",
        )
        async def get_all(
            request: Request,
            repo: Repo,
            page: int = Query(1, ge=1, description="Page number (1-based)"),
            limit: int = Query(DEFAULT_LIMIT, ge=1, description="Page size"),
            order_by: str = Query(DEFAULT_ORDER_BY, alias="orderBy", description="Sort field"),
            order_direction: str = Query(
                DEFAULT_ORDER_DIRECTION,
                alias="orderDirection",
                pattern="^(ASC|DESC|asc|desc)$",
                description="Sort direction",
            ),
        ):
            """Any other query parameter filters on the field of the same name"""
            filters = {
                key: value
                for key, value in request.query_params.items()
                if key not in LIST_PARAMS
            }
            return await handler.get_all(repo, page, limit, order_by, order_direction, filters)

        @self.router.get(
            "/{id}",
            response_model=Envelope,
            responses={**_ERROR_RESPONSES, **_NOT_FOUND_RESPONSE},
            summary=f"Get a {label} by ID",
        )
        async def get_by_id(id: str, repo: Repo):
            return await handler.get_by_id(repo, id)

        @self.router.patch(
            "/{id}",
            response_model=Envelope,
            responses={**_ERROR_RESPONSES, **_NOT_FOUND_RESPONSE},
            summary=f"Update a {label} by ID",
        )
        async def update(id: str, repo: Repo, data: update_schema = Body(...)):  # type: ignore[valid-type]
            return await handler.update(repo, id, data.model_dump(exclude_unset=True))

        @self.router.delete(
            "/{id}",
            response_model=Envelope,
            responses={**_ERROR_RESPONSES, **_NOT_FOUND_RESPONSE},
            summary=f"Delete a {label} by ID",
        )
        async def delete(id: str, repo: Repo):
            return await handler.delete(repo, id)
