"""Generic CRUD service - application layer data access for any entity type."""

import asyncio
import dataclasses
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Generic, Optional, TypeVar

from crudkit.application.dtos.paging_dto import PagingResult
from crudkit.application.exceptions import EntityNotFoundError
from crudkit.application.services.filter_parser import (
    nullable_fields,
    validate_fields,
    validate_options,
)
from crudkit.domain.exceptions import MalformedFilterException
from crudkit.domain.query import (
    DEFAULT_PAGE_SIZE,
    MAX_OFFSET,
    FilterOptions,
    FindOptions,
    PagingOptions,
    normalize_where,
)
from crudkit.domain.repositories.base import IRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CrudService(Generic[T]):
    """
    Data-access component for one entity type.

    This service:
    1. Depends on the IRepository abstraction (not a concrete storage engine)
    2. Validates query options against the entity's fields before any storage call
    3. Implements count/find/paging/create/update/upsert/delete on top of the
       repository's primitive operations
    4. Holds no state besides its collaborators, so one instance per entity
       type serves every request

    Lookups by identifier always go through ``find_by_ids`` with a single id,
    so the storage engine does not need a dedicated single-id lookup.

    Example:
        residents = CrudService(Resident, SQLAlchemyRepository(...))
        page = await residents.paging(PagingOptions(page=1, page_size=20))

    Entity-specific services subclass it:
        class ResidentService(CrudService[Resident]):
            ...
    """

    def __init__(
        self,
        entity_type: type[T],
        repository: IRepository[T],
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ):
        """
        Initialize service with dependencies.

        Args:
            entity_type: Dataclass type of the managed entity
            repository: Storage for that entity type
            default_page_size: Page size used when paging options leave it unset
        """
        if not dataclasses.is_dataclass(entity_type):
            raise TypeError(f"{entity_type!r} is not a dataclass entity type")
        if default_page_size <= 0:
            raise ValueError("default_page_size must be positive")

        self._entity_type = entity_type
        self._repository = repository
        self._default_page_size = default_page_size

    @property
    def entity_type(self) -> type[T]:
        return self._entity_type

    @property
    def entity_name(self) -> str:
        return self._entity_type.__name__

    async def count(self, where: Optional[Mapping[str, Any]] = None) -> int:
        """Count entities matching ``where`` (all entities when None)."""
        predicate = normalize_where(where)
        validate_options(self._entity_type, FilterOptions(where=predicate))
        return await self._repository.count(predicate)

    async def find(self, options: Optional[FilterOptions] = None) -> list[T]:
        """Return every entity matching ``options``, unbounded."""
        validate_options(self._entity_type, options)
        return await self._repository.find(FindOptions.from_filter(options))

    async def find_one(self, options: Optional[FilterOptions] = None) -> Optional[T]:
        """
        Return the first entity matching ``options`` in the declared order.

        Returns:
            The entity, or None when nothing matches (absence is not an error)
        """
        validate_options(self._entity_type, options)
        docs = await self._repository.find(FindOptions.from_filter(options, take=1))
        return docs[0] if docs else None

    async def find_by_id(self, id: Any) -> Optional[T]:
        """Look up one entity by identifier, None if absent."""
        docs = await self._repository.find_by_ids([id])
        return docs[0] if docs else None

    async def find_by_ids(self, ids: Sequence[Any]) -> list[T]:
        """Look up every entity whose identifier is in ``ids``."""
        return await self._repository.find_by_ids(list(ids))

    async def paging(self, options: Optional[PagingOptions] = None) -> PagingResult[T]:
        """
        Return one page of matching entities plus page metadata.

        The count and the bounded find are issued concurrently against the
        same predicate. They are not read in one transaction, so a write
        landing between them can make ``total`` and ``data`` disagree slightly.

        Args:
            options: Filter options plus page (default 0) and page size

        Returns:
            PagingResult with total, pages, page, page_size and data
        """
        if options is None:
            options = PagingOptions()
        validate_options(self._entity_type, options)

        page_size = options.page_size or self._default_page_size
        skip = page_size * options.page
        take = page_size
        if skip > MAX_OFFSET:
            raise MalformedFilterException(
                f"'page' {options.page} is out of range for page size {page_size}"
            )

        total, data = await asyncio.gather(
            self._repository.count(options.where),
            self._repository.find(FindOptions.from_filter(options, skip=skip, take=take)),
        )

        logger.debug(
            "Paged %s: page=%d page_size=%d total=%d returned=%d",
            self.entity_name,
            options.page,
            page_size,
            total,
            len(data),
        )
        return PagingResult.build(total=total, skip=skip, page_size=page_size, data=data)

    async def create(self, entity: T) -> T:
        """
        Insert a new entity.

        Returns:
            The input entity merged with the identifiers storage assigned

        Raises:
            Storage errors (e.g. constraint violations) unchanged
        """
        result = await self._repository.insert(entity)
        identifiers = result.identifiers[0] if result.identifiers else {}
        logger.debug("Created %s %s", self.entity_name, identifiers)
        return dataclasses.replace(entity, **identifiers)

    async def update_by_id(self, id: Any, entity: "T | Mapping[str, Any]") -> T:
        """
        Update the entity with identifier ``id``.

        Merge is shallow: every field present in ``entity`` overwrites the
        stored field of the same name; other fields are left unchanged. When
        ``entity`` is an entity instance, fields holding None count as absent.

        Args:
            id: Identifier of the entity to update
            entity: Field values (mapping) or an entity instance

        Returns:
            The previously stored entity with the new values applied

        Raises:
            EntityNotFoundError: If no entity has this identifier
            MalformedFilterException: If a value names an unknown field or sets
                a non-Optional field to None
            InvalidEntityStateException: If the merged entity breaks an invariant
        """
        values = self._update_values(entity)

        doc = await self.find_by_id(id)
        if doc is None:
            logger.info("Update of %s with id %s rejected: not found", self.entity_name, id)
            raise EntityNotFoundError(self.entity_name, id)

        # Entity invariants are checked on the merged result before writing
        updated = dataclasses.replace(doc, **values)
        if values:
            await self._repository.update(id, values)
        return updated

    async def upsert(self, entity: T) -> T:
        """
        Insert the entity if absent, otherwise replace the stored one.

        Returns:
            The entity exactly as storage reports it (no local merge)
        """
        return await self._repository.save(entity)

    async def delete_by_id(self, id: Any) -> Optional[T]:
        """
        Delete the entity with identifier ``id``.

        Returns:
            The removed entity, or None when it did not exist
        """
        doc = await self.find_by_id(id)
        if doc is None:
            return None

        removed = await self._repository.remove(doc)
        logger.debug("Deleted %s with id %s", self.entity_name, id)
        return removed

    def _update_values(self, entity: "T | Mapping[str, Any]") -> dict[str, Any]:
        if isinstance(entity, Mapping):
            values = dict(entity)
        elif isinstance(entity, self._entity_type):
            values = {
                f.name: getattr(entity, f.name)
                for f in dataclasses.fields(entity)
                if getattr(entity, f.name) is not None
            }
        else:
            raise TypeError(
                f"Expected a mapping or {self.entity_name} instance, got {type(entity).__name__}"
            )

        validate_fields(self._entity_type, values)
        nullable = nullable_fields(self._entity_type)
        cleared = sorted(
            name for name, value in values.items() if value is None and name not in nullable
        )
        if cleared:
            raise MalformedFilterException(
                f"{self.entity_name} field(s) cannot be set to null: {', '.join(cleared)}"
            )
        return values


def create_crud_service(
    entity_type: type[T],
    repository: IRepository[T],
    default_page_size: int = DEFAULT_PAGE_SIZE,
) -> CrudService[T]:
    """Instantiate the data-access component for ``entity_type``."""
    return CrudService(entity_type, repository, default_page_size=default_page_size)
