"""Resident API endpoints.

Every CRUD route comes from the router factory; mutations are audited.
"""

from fastapi import Depends

from crudkit.application.services.resident_service import ResidentService
from crudkit.domain.entities.resident import Resident
from crudkit.presentation.dependencies import get_audit_trail, get_resident_service
from crudkit.presentation.routing import create_audited_crud_router
from crudkit.presentation.schemas import entity_schemas

router = create_audited_crud_router(
    Resident,
    get_resident_service,
    get_audit_trail,
    prefix="/residents",
    tags=["residents"],
)

ResidentSchema = entity_schemas(Resident).read


@router.get(
    "/room/{room}",
    response_model=list[ResidentSchema],
    summary="List residents of a room",
    description="Retrieve every resident assigned to a room, ordered by name.",
)
async def get_residents_by_room(
    room: str,
    service: ResidentService = Depends(get_resident_service),
) -> list[Resident]:
    """List residents of one room."""
    return await service.find_by_room(room)
