"""Base repository interface following Clean Architecture."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from crudkit.domain.query import FindOptions

# Generic type for domain entities
T = TypeVar("T")


@dataclass
class InsertResult:
    """
    Storage report for an insert.

    ``identifiers`` holds one mapping per inserted entity with the values the
    storage engine assigned to its identifier columns (e.g. ``{"id": 7}``).
    """

    identifiers: list[dict[str, Any]] = field(default_factory=list)


class IRepository(ABC, Generic[T]):
    """
    Generic storage contract for one entity type.

    This interface belongs to the DOMAIN layer and defines the operations the
    data-access component needs, without any implementation details. Every
    storage engine the components run against must support count/find/insert/
    update/delete by identifier and by predicate.

    Type Parameters:
        T: The domain entity type this repository manages
    """

    @abstractmethod
    async def count(self, where: Optional[dict[str, Any]] = None) -> int:
        """
        Count entities matching a predicate.

        Args:
            where: Filter predicate, None to count everything

        Returns:
            Number of matching entities
        """
        pass

    @abstractmethod
    async def find(self, options: Optional[FindOptions] = None) -> list[T]:
        """
        Retrieve entities honoring projection, predicate, order and bounds.

        Args:
            options: select/where/order plus skip/take, None for everything

        Returns:
            List of entities in the requested order
        """
        pass

    @abstractmethod
    async def find_by_ids(self, ids: Sequence[Any]) -> list[T]:
        """
        Retrieve the entities whose identifier is in ``ids``.

        Args:
            ids: Identifiers to look up

        Returns:
            Matching entities, empty list if none exist
        """
        pass

    @abstractmethod
    async def insert(self, entity: T) -> InsertResult:
        """
        Insert a new entity.

        Args:
            entity: The entity to insert

        Returns:
            InsertResult with the identifiers assigned by storage

        Raises:
            Storage errors (e.g. constraint violations) unchanged
        """
        pass

    @abstractmethod
    async def update(self, id: Any, values: dict[str, Any]) -> None:
        """
        Apply field values to the entity with identifier ``id``.

        Args:
            id: The unique identifier
            values: Field name to new value
        """
        pass

    @abstractmethod
    async def remove(self, entity: T) -> T:
        """
        Remove a stored entity.

        Args:
            entity: The entity to remove (as previously read from storage)

        Returns:
            The removed entity
        """
        pass

    @abstractmethod
    async def save(self, entity: T) -> T:
        """
        Insert the entity if absent, otherwise replace the stored one.

        Args:
            entity: The entity to store

        Returns:
            The entity as stored
        """
        pass
