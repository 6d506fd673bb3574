"""Generic repository implementation using SQLAlchemy."""

import dataclasses
import logging
from collections.abc import Sequence
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import ColumnElement, Select, delete, func, inspect, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from crudkit.domain.query import FieldOperators, FindOptions, SortDirection
from crudkit.domain.repositories.base import InsertResult, IRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SQLAlchemyRepository(IRepository[T], Generic[T]):
    """
    SQLAlchemy implementation of IRepository for any dataclass entity.

    This class contains all database-specific code and depends on:
    - SQLAlchemy (infrastructure)
    - a declarative ORM model whose mapped attributes carry the same names as
      the entity's dataclass fields

    Each call opens its own session from the factory and commits mutations
    immediately, so independent calls (like the count and the page query of
    ``paging``) can run concurrently. It returns domain entities, never
    exposing ORM models to the application layer.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type,
        entity_type: type[T],
    ):
        """
        Initialize repository.

        Args:
            session_factory: SQLAlchemy async session factory
            model: Declarative ORM model mapped to the entity's table
            entity_type: Dataclass entity type returned to callers
        """
        self._session_factory = session_factory
        self._model = model
        self._entity_type = entity_type
        self._field_names = [f.name for f in dataclasses.fields(entity_type)]

        mapper = inspect(model)
        primary_key = mapper.primary_key
        if len(primary_key) != 1:
            raise ValueError(f"{model.__name__} must have exactly one primary key column")
        self._pk_name = mapper.get_property_by_column(primary_key[0]).key
        self._pk = getattr(model, self._pk_name)
        # Attributes storage fills in itself when left unset
        self._defaulted = {
            prop.key
            for prop in mapper.column_attrs
            if any(
                col.primary_key or col.default is not None or col.server_default is not None
                for col in prop.columns
            )
        }

    # Mapping between entities and ORM rows

    def _to_entity(self, row: Any) -> T:
        return self._entity_type(**{name: getattr(row, name) for name in self._field_names})

    def _projection_to_entity(self, row: Any, selected: Sequence[str]) -> T:
        values = dict.fromkeys(self._field_names)
        values.update({name: row[name] for name in selected})
        return self._entity_type(**values)

    def _to_model(self, entity: T, replace: bool = False) -> Any:
        values = {name: getattr(entity, name) for name in self._field_names}
        # Unset values go to column defaults (generated keys, timestamps); when
        # replacing, every other field is written, None included
        return self._model(
            **{
                name: value
                for name, value in values.items()
                if value is not None or (replace and name not in self._defaulted)
            }
        )

    # Query translation

    def _column(self, name: str) -> Any:
        return getattr(self._model, name)

    def _conditions(self, where: Optional[dict[str, Any]]) -> list[ColumnElement[bool]]:
        conditions: list[ColumnElement[bool]] = []
        for name, constraint in (where or {}).items():
            column = self._column(name)
            if not isinstance(constraint, FieldOperators):
                conditions.append(column.is_(None) if constraint is None else column == constraint)
                continue
            for operator, operand in constraint.items():
                if operator == "in":
                    conditions.append(column.in_(list(operand)))
                elif operator == "nin":
                    conditions.append(column.not_in(list(operand)))
                elif operator == "gt":
                    conditions.append(column > operand)
                elif operator == "gte":
                    conditions.append(column >= operand)
                elif operator == "lt":
                    conditions.append(column < operand)
                elif operator == "lte":
                    conditions.append(column <= operand)
        return conditions

    def _apply_find_options(self, query: Select, options: FindOptions) -> Select:
        conditions = self._conditions(options.where)
        if conditions:
            query = query.where(*conditions)
        for entry in options.order or ():
            column = self._column(entry.field)
            query = query.order_by(
                column.desc() if entry.direction == SortDirection.DESC else column.asc()
            )
        if options.skip:
            query = query.offset(options.skip)
        if options.take is not None:
            query = query.limit(options.take)
        return query

    # IRepository

    async def count(self, where: Optional[dict[str, Any]] = None) -> int:
        """Count rows matching the predicate."""
        query = select(func.count()).select_from(self._model)
        conditions = self._conditions(where)
        if conditions:
            query = query.where(*conditions)
        async with self._session_factory() as session:
            result = await session.execute(query)
            return result.scalar() or 0

    async def find(self, options: Optional[FindOptions] = None) -> list[T]:
        """Select rows, or only the projected columns when ``select`` is set."""
        options = options or FindOptions()
        async with self._session_factory() as session:
            if options.select:
                columns = [self._column(name) for name in options.select]
                query = self._apply_find_options(select(*columns), options)
                result = await session.execute(query)
                return [
                    self._projection_to_entity(row, options.select)
                    for row in result.mappings().all()
                ]

            query = self._apply_find_options(select(self._model), options)
            result = await session.execute(query)
            return [self._to_entity(row) for row in result.scalars().all()]

    async def find_by_ids(self, ids: Sequence[Any]) -> list[T]:
        """Select rows whose primary key is in ``ids``."""
        if not ids:
            return []
        async with self._session_factory() as session:
            result = await session.execute(
                select(self._model).where(self._pk.in_(list(ids)))
            )
            return [self._to_entity(row) for row in result.scalars().all()]

    async def insert(self, entity: T) -> InsertResult:
        """
        Insert a new row.

        Note: We flush to obtain the generated primary key, then commit.
        """
        row = self._to_model(entity)
        async with self._session_factory() as session:
            session.add(row)
            await session.flush()
            identifiers = {self._pk_name: getattr(row, self._pk_name)}
            await session.commit()
        logger.debug("Inserted %s %s", self._model.__name__, identifiers)
        return InsertResult(identifiers=[identifiers])

    async def update(self, id: Any, values: dict[str, Any]) -> None:
        """Apply ``values`` to the row with primary key ``id``."""
        async with self._session_factory() as session:
            await session.execute(
                update(self._model).where(self._pk == id).values(**values)
            )
            await session.commit()

    async def remove(self, entity: T) -> T:
        """Delete the row of ``entity`` and return the entity."""
        id = getattr(entity, self._pk_name)
        async with self._session_factory() as session:
            await session.execute(delete(self._model).where(self._pk == id))
            await session.commit()
        return entity

    async def save(self, entity: T) -> T:
        """Insert or fully replace the row of ``entity`` (merge by primary key)."""
        async with self._session_factory() as session:
            row = await session.merge(self._to_model(entity, replace=True))
            await session.flush()
            await session.refresh(row)
            stored = self._to_entity(row)
            await session.commit()
        return stored
