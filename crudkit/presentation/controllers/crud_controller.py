"""Request-handling components built on top of CrudService.

A controller maps externally observable requests (flat query parameters,
typed bodies, path identifiers) onto data-access calls. It knows nothing
about the web framework; ``crudkit.presentation.routing`` exposes it over
FastAPI using the route table computed from CrudRouteOptions.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, TypeVar, Union

from crudkit.application.dtos.paging_dto import PagingResult
from crudkit.application.exceptions import EntityNotFoundError
from crudkit.application.services.audit_trail import AuditTrail
from crudkit.application.services.crud_service import CrudService
from crudkit.application.services.filter_parser import parse_filter_query, parse_paging_query

T = TypeVar("T")


@dataclass(frozen=True)
class RouteSpec:
    """One externally invocable operation: controller method plus HTTP binding."""

    name: str
    method: str
    path: str
    summary: str
    status_code: int = 200


@dataclass(frozen=True)
class CrudRouteOptions:
    """
    Which operations are exposed.

    Each flag is ``bool | str``. A falsy flag means the route is not
    registered at all. A non-empty string enables the route and is used as
    its summary. ``list`` governs both ``GET /`` and ``GET /all``.
    """

    list: Union[bool, str] = True
    find_one: Union[bool, str] = True
    find_by_id: Union[bool, str] = True
    create: Union[bool, str] = True
    update: Union[bool, str] = True
    delete_by_id: Union[bool, str] = True

    def route_table(self) -> tuple[RouteSpec, ...]:
        """
        Build the enabled routes, in registration order.

        Literal paths (``/all``, ``/findOne``) come before ``/{id}`` so they
        are matched first.
        """
        candidates = (
            (self.list, RouteSpec("list", "GET", "/", "List a page of entities")),
            (self.list, RouteSpec("list_all", "GET", "/all", "List all entities")),
            (self.find_one, RouteSpec("find_one", "GET", "/findOne", "Find the first matching entity")),
            (self.find_by_id, RouteSpec("find_by_id", "GET", "/{id}", "Get entity by ID")),
            (self.create, RouteSpec("create", "POST", "/", "Create entity", status_code=201)),
            (self.update, RouteSpec("update", "PUT", "/{id}", "Update entity")),
            (self.delete_by_id, RouteSpec("delete_by_id", "DELETE", "/{id}", "Delete entity")),
        )
        table = []
        for flag, spec in candidates:
            if not flag:
                continue
            if isinstance(flag, str) and spec.name != "list_all":
                spec = RouteSpec(spec.name, spec.method, spec.path, flag, spec.status_code)
            table.append(spec)
        return tuple(table)


class CrudController(Generic[T]):
    """
    Request-handling component for one entity type.

    Errors are not handled here: not-found, malformed filters and storage
    failures propagate to the boundary's exception handlers.
    """

    def __init__(self, service: CrudService[T]):
        """
        Args:
            service: Data-access component of the entity type
        """
        self._service = service

    @property
    def entity_type(self) -> type[T]:
        return self._service.entity_type

    async def list(self, filter: Optional[Mapping[str, Any]] = None) -> PagingResult[T]:
        """Page through entities, parsing ``filter`` from flat query parameters."""
        options = parse_paging_query(self.entity_type, filter) if filter else None
        return await self._service.paging(options)

    async def list_all(self) -> List[T]:
        """Every entity, unbounded."""
        return await self._service.find()

    async def find_one(self, filter: Optional[Mapping[str, Any]] = None) -> T:
        """
        First entity matching ``filter``.

        Raises:
            EntityNotFoundError: If nothing matches
        """
        options = parse_filter_query(self.entity_type, filter) if filter else None
        doc = await self._service.find_one(options)
        if doc is None:
            raise EntityNotFoundError(self._service.entity_name)
        return doc

    async def find_by_id(self, id: Any) -> T:
        """
        Entity with identifier ``id``.

        Raises:
            EntityNotFoundError: If it does not exist
        """
        doc = await self._service.find_by_id(id)
        if doc is None:
            raise EntityNotFoundError(self._service.entity_name, id)
        return doc

    async def create(self, data: T) -> T:
        return await self._service.create(data)

    async def update(self, id: Any, data: Union[T, Mapping[str, Any]]) -> T:
        return await self._service.update_by_id(id, data)

    async def delete_by_id(self, id: Any) -> bool:
        """True only if an entity existed and was removed."""
        doc = await self._service.delete_by_id(id)
        return doc is not None


class AuditedCrudController(CrudController[T]):
    """
    CrudController that records an audit entry before every mutation.

    Entries ("Create Resident", "Update Resident", "Delete Resident") are
    submitted through the AuditTrail without waiting for them, and before
    the mutation runs, so a failed mutation is still audited.
    """

    def __init__(self, service: CrudService[T], audit_trail: AuditTrail):
        super().__init__(service)
        self._audit_trail = audit_trail

    async def create(self, data: T) -> T:
        self._audit_trail.record("Create", self.entity_type)
        return await super().create(data)

    async def update(self, id: Any, data: Union[T, Mapping[str, Any]]) -> T:
        self._audit_trail.record("Update", self.entity_type)
        return await super().update(id, data)

    async def delete_by_id(self, id: Any) -> bool:
        self._audit_trail.record("Delete", self.entity_type)
        return await super().delete_by_id(id)
