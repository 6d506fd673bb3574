"""Query option types shared by every entity's data-access component.

These types describe WHAT to select, filter and order, independent of how a
storage engine executes it. Repositories translate them into their own query
language; the application layer builds them from user input.

Predicate shape:
    where = {
        "name": "Alice",                        # equality
        "age": FieldOperators(gte=18, lt=65),   # range
        "room": {"in": ["A1", "A2"]},           # plain dict, normalised
    }

Fields absent from ``where`` are unconstrained.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional

from crudkit.domain.exceptions import MalformedFilterException

SET_OPERATORS = ("in", "nin")
RANGE_OPERATORS = ("gt", "gte", "lt", "lte")
OPERATORS = SET_OPERATORS + RANGE_OPERATORS

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 1000
# Largest row offset storage engines accept (signed 64-bit)
MAX_OFFSET = 2**63 - 1


def _is_value_list(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


@dataclass(frozen=True)
class FieldOperators:
    """
    Operator set constraining a single field.

    ``in_`` is spelled with a trailing underscore because ``in`` is a keyword;
    on the wire and in plain dicts the key is ``in``.
    """

    in_: Optional[Sequence[Any]] = None
    nin: Optional[Sequence[Any]] = None
    gt: Any = None
    gte: Any = None
    lt: Any = None
    lte: Any = None

    def __post_init__(self):
        for name in SET_OPERATORS:
            value = self.get(name)
            if value is not None and not _is_value_list(value):
                raise MalformedFilterException(
                    f"Operator '{name}' expects a list of values, got {type(value).__name__}"
                )
        if not any(True for _ in self.items()):
            raise MalformedFilterException("Operator set must contain at least one operator")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "FieldOperators":
        """
        Build an operator set from a ``{"in": [...], "gte": 3}`` style mapping.

        Raises:
            MalformedFilterException: If a key is not a known operator
        """
        unknown = [key for key in raw if key not in OPERATORS]
        if unknown:
            raise MalformedFilterException(
                f"Unknown filter operator(s) {', '.join(map(str, unknown))}; "
                f"expected one of {', '.join(OPERATORS)}"
            )
        kwargs = {("in_" if key == "in" else key): value for key, value in raw.items()}
        return cls(**kwargs)

    def get(self, operator: str) -> Any:
        """Return the operand of ``operator`` (wire name) or None when unset."""
        return getattr(self, "in_" if operator == "in" else operator)

    def items(self) -> Iterator[tuple[str, Any]]:
        """Yield ``(operator, operand)`` pairs for every operator that is set."""
        for operator in OPERATORS:
            value = self.get(operator)
            if value is not None:
                yield operator, value

    @property
    def has_range(self) -> bool:
        return any(self.get(op) is not None for op in RANGE_OPERATORS)


class SortDirection(str, Enum):
    """Sort direction of one order entry."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: "str | SortDirection") -> "SortDirection":
        if isinstance(value, SortDirection):
            return value
        normalized = str(value).strip().lower()
        if normalized in ("asc", "ascending"):
            return cls.ASC
        if normalized in ("desc", "descending"):
            return cls.DESC
        raise MalformedFilterException(
            f"Invalid sort direction '{value}'; expected 'asc' or 'desc'"
        )


@dataclass(frozen=True)
class OrderBy:
    """One ``{field, direction}`` entry of an order specification."""

    field: str
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def coerce(cls, raw: Any) -> "OrderBy":
        """Accept an OrderBy, a ``(field, dir)`` pair or a ``{"field", "dir"}`` mapping."""
        if isinstance(raw, OrderBy):
            return raw
        if isinstance(raw, Mapping):
            if "field" not in raw:
                raise MalformedFilterException("Order entry is missing 'field'")
            direction = raw.get("dir", raw.get("direction", SortDirection.ASC))
            return cls(str(raw["field"]), SortDirection.parse(direction))
        if isinstance(raw, (list, tuple)) and len(raw) == 2:
            return cls(str(raw[0]), SortDirection.parse(raw[1]))
        if isinstance(raw, str) and raw:
            return cls(raw)
        raise MalformedFilterException(f"Invalid order entry: {raw!r}")


def normalize_where(where: Optional[Mapping[str, Any]]) -> Optional[dict[str, Any]]:
    """
    Normalise a predicate so that every operator set is a FieldOperators.

    Mapping values are always read as operator sets; any other value is an
    equality constraint.

    Raises:
        MalformedFilterException: If the predicate is not a mapping or an
            operator set is invalid
    """
    if where is None:
        return None
    if not isinstance(where, Mapping):
        raise MalformedFilterException(
            f"'where' must be an object mapping fields to constraints, got {type(where).__name__}"
        )
    normalized: dict[str, Any] = {}
    for name, constraint in where.items():
        if isinstance(constraint, Mapping):
            constraint = FieldOperators.from_mapping(constraint)
        normalized[str(name)] = constraint
    return normalized


@dataclass
class FilterOptions:
    """Projection, predicate and ordering for a query."""

    select: Optional[list[str]] = None
    where: Optional[dict[str, Any]] = None
    order: Optional[list[OrderBy]] = None

    def __post_init__(self):
        if self.select is not None:
            if isinstance(self.select, str) or not _is_value_list(self.select):
                raise MalformedFilterException("'select' must be a list of field names")
            if not self.select:
                raise MalformedFilterException("'select' must name at least one field")
            self.select = [str(name) for name in self.select]
        self.where = normalize_where(self.where)
        if self.order is not None:
            if not _is_value_list(self.order):
                raise MalformedFilterException("'order' must be a list of order entries")
            self.order = [OrderBy.coerce(entry) for entry in self.order]

    def referenced_fields(self) -> set[str]:
        """Every field name this query mentions (projection, predicate, ordering)."""
        names = set(self.select or ())
        names.update(self.where or {})
        names.update(entry.field for entry in self.order or ())
        return names

    def filter_kwargs(self) -> dict[str, Any]:
        return {"select": self.select, "where": self.where, "order": self.order}


@dataclass
class PagingOptions(FilterOptions):
    """
    Filter options plus page bounds.

    ``page_size`` left as None means "use the component's default page size"
    (10 unless configured otherwise). Page sizes are capped at MAX_PAGE_SIZE
    and the resulting row offset at MAX_OFFSET.
    """

    page: int = 0
    page_size: Optional[int] = None

    def __post_init__(self):
        super().__post_init__()
        if isinstance(self.page, bool) or not isinstance(self.page, int) or self.page < 0:
            raise MalformedFilterException(
                f"'page' must be a non-negative integer, got {self.page!r}"
            )
        if self.page_size is not None and (
            isinstance(self.page_size, bool)
            or not isinstance(self.page_size, int)
            or not 0 < self.page_size <= MAX_PAGE_SIZE
        ):
            raise MalformedFilterException(
                f"'pageSize' must be an integer between 1 and {MAX_PAGE_SIZE}, "
                f"got {self.page_size!r}"
            )
        if self.page * (self.page_size or 1) > MAX_OFFSET:
            raise MalformedFilterException(
                f"'page' {self.page} is out of range for page size {self.page_size}"
            )


@dataclass
class FindOptions(FilterOptions):
    """Storage-facing options: filter options plus skip/take bounds."""

    skip: Optional[int] = None
    take: Optional[int] = None

    @classmethod
    def from_filter(
        cls,
        options: Optional[FilterOptions],
        skip: Optional[int] = None,
        take: Optional[int] = None,
    ) -> "FindOptions":
        if options is None:
            return cls(skip=skip, take=take)
        return cls(**options.filter_kwargs(), skip=skip, take=take)


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_OFFSET",
    "MAX_PAGE_SIZE",
    "OPERATORS",
    "RANGE_OPERATORS",
    "SET_OPERATORS",
    "FieldOperators",
    "FilterOptions",
    "FindOptions",
    "OrderBy",
    "PagingOptions",
    "SortDirection",
    "normalize_where",
]
