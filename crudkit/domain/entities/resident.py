"""Resident domain entity."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from crudkit.domain.exceptions import InvalidEntityStateException


@dataclass
class Resident:
    """
    A resident registered in a residence.

    Plain dataclass with no framework dependencies. Fields may be None when the
    entity is a projection (``select``) of a stored record, so the invariants
    below only constrain values that are present.
    """

    name: str
    room: str
    age: Optional[int] = None
    phone: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate entity invariants at construction time."""
        if self.name is not None and len(self.name.strip()) == 0:
            raise InvalidEntityStateException(
                "Name cannot be empty. Resident must have a valid name."
            )

        if self.room is not None and len(self.room.strip()) == 0:
            raise InvalidEntityStateException(
                "Room cannot be empty. Resident must be assigned to a room."
            )

        if self.age is not None and self.age < 0:
            raise InvalidEntityStateException(
                f"Invalid age: {self.age}. Age cannot be negative."
            )
