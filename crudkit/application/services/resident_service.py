"""Resident service - CrudService plus resident-specific queries."""

from crudkit.application.services.crud_service import CrudService
from crudkit.domain.entities.resident import Resident
from crudkit.domain.query import FilterOptions, OrderBy


class ResidentService(CrudService[Resident]):
    """Data-access component for residents."""

    async def find_by_room(self, room: str) -> list[Resident]:
        """Residents of one room, ordered by name."""
        return await self.find(
            FilterOptions(where={"room": room}, order=[OrderBy("name")])
        )
