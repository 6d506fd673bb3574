"""Router factory - exposes a controller's enabled operations over FastAPI.

Usage:
    router = create_crud_router(
        Resident,
        get_resident_service,
        CrudRouteOptions(delete_by_id=False),
        prefix="/residents",
        tags=["residents"],
    )
    app.include_router(router, prefix="/api")

The route table is fixed when the router is built; disabled operations are
never registered, so they answer 404/405 like any unknown route.
"""

import logging
from collections.abc import Callable
from typing import Any, List, Optional, TypeVar

from fastapi import APIRouter, Depends, Request

from crudkit.application.dtos.paging_dto import PagingResult
from crudkit.application.services.audit_trail import AuditTrail
from crudkit.application.services.crud_service import CrudService
from crudkit.presentation.controllers.crud_controller import (
    AuditedCrudController,
    CrudController,
    CrudRouteOptions,
)
from crudkit.presentation.schemas import entity_schemas

logger = logging.getLogger(__name__)

T = TypeVar("T")

ControllerDependency = Callable[..., CrudController]


def create_crud_router(
    entity_type: type[T],
    service_dependency: Callable[..., CrudService[T]],
    options: Optional[CrudRouteOptions] = None,
    *,
    prefix: str = "",
    tags: Optional[list[str]] = None,
    id_field: str = "id",
) -> APIRouter:
    """
    Build the router of a plain CRUD controller.

    Args:
        entity_type: Dataclass entity type
        service_dependency: FastAPI dependency returning the entity's CrudService
        options: Enabled operations (all by default)
        prefix: Router prefix, e.g. "/residents"
        tags: OpenAPI tags
        id_field: Identifier field of the entity

    Returns:
        APIRouter with one route per enabled operation
    """

    def get_controller(
        service: CrudService[T] = Depends(service_dependency),
    ) -> CrudController[T]:
        return CrudController(service)

    return _build_router(entity_type, get_controller, options, prefix, tags, id_field)


def create_audited_crud_router(
    entity_type: type[T],
    service_dependency: Callable[..., CrudService[T]],
    audit_trail_dependency: Callable[..., AuditTrail],
    options: Optional[CrudRouteOptions] = None,
    *,
    prefix: str = "",
    tags: Optional[list[str]] = None,
    id_field: str = "id",
) -> APIRouter:
    """
    Build the router of an audited CRUD controller.

    Same routes as ``create_crud_router``; create/update/delete additionally
    submit an audit entry through the AuditTrail returned by
    ``audit_trail_dependency``.
    """

    def get_controller(
        service: CrudService[T] = Depends(service_dependency),
        audit_trail: AuditTrail = Depends(audit_trail_dependency),
    ) -> CrudController[T]:
        return AuditedCrudController(service, audit_trail)

    return _build_router(entity_type, get_controller, options, prefix, tags, id_field)


def _build_router(
    entity_type: type,
    get_controller: ControllerDependency,
    options: Optional[CrudRouteOptions],
    prefix: str,
    tags: Optional[list[str]],
    id_field: str,
) -> APIRouter:
    options = options or CrudRouteOptions()
    schemas = entity_schemas(entity_type, id_field)
    CreateSchema = schemas.create
    UpdateSchema = schemas.update
    IdType = schemas.id_type

    async def list_entities(
        request: Request,
        controller: CrudController = Depends(get_controller),
    ) -> Any:
        return await controller.list(dict(request.query_params))

    async def list_all_entities(
        controller: CrudController = Depends(get_controller),
    ) -> Any:
        return await controller.list_all()

    async def find_one_entity(
        request: Request,
        controller: CrudController = Depends(get_controller),
    ) -> Any:
        return await controller.find_one(dict(request.query_params))

    async def find_entity_by_id(
        id: IdType,
        controller: CrudController = Depends(get_controller),
    ) -> Any:
        return await controller.find_by_id(id)

    async def create_entity(
        data: CreateSchema,
        controller: CrudController = Depends(get_controller),
    ) -> Any:
        return await controller.create(entity_type(**data.model_dump()))

    async def update_entity(
        id: IdType,
        data: UpdateSchema,
        controller: CrudController = Depends(get_controller),
    ) -> Any:
        return await controller.update(id, data.model_dump(exclude_unset=True))

    async def delete_entity(
        id: IdType,
        controller: CrudController = Depends(get_controller),
    ) -> bool:
        return await controller.delete_by_id(id)

    endpoints = {
        "list": (list_entities, PagingResult[schemas.read]),
        "list_all": (list_all_entities, List[schemas.read]),
        "find_one": (find_one_entity, schemas.read),
        "find_by_id": (find_entity_by_id, schemas.read),
        "create": (create_entity, schemas.read),
        "update": (update_entity, schemas.read),
        "delete_by_id": (delete_entity, bool),
    }

    router = APIRouter(prefix=prefix, tags=tags)
    for spec in options.route_table():
        endpoint, response_model = endpoints[spec.name]
        router.add_api_route(
            spec.path,
            endpoint,
            methods=[spec.method],
            response_model=response_model,
            status_code=spec.status_code,
            summary=spec.summary,
            name=f"{entity_type.__name__}.{spec.name}",
        )

    logger.debug(
        "Built %s router with routes: %s",
        entity_type.__name__,
        ", ".join(f"{spec.method} {prefix}{spec.path}" for spec in options.route_table()),
    )
    return router
