"""Flat query parsing and validation of filter/paging options.

Query parameters arrive as a flat key-value mapping. This module turns them
into FilterOptions/PagingOptions for one entity type, coercing every value
to the annotated type of the field it constrains.

Flat encoding:
    page=1&pageSize=20                  page bounds (pageSize or page_size)
    select=name,room                    projection
    order=room,-age  |  order=age:desc  ordering, '-' or ':desc' for descending
    where.room=A1                       equality
    where.age.gte=18                    operator (in, nin, gt, gte, lt, lte)
    where.room.in=A1,A2                 'in'/'nin' take comma-separated values
    filter={"where": {...}, ...}        whole options object as JSON

``null`` (JSON filter only) matches unset values of Optional fields.

Anything that cannot be parsed raises MalformedFilterException; nothing is
silently dropped.
"""

import json
import types
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from functools import lru_cache
from typing import Any, Optional, Union, get_args, get_origin, get_type_hints

from pydantic import TypeAdapter, ValidationError

from crudkit.domain.exceptions import MalformedFilterException
from crudkit.domain.query import (
    OPERATORS,
    SET_OPERATORS,
    FieldOperators,
    FilterOptions,
    OrderBy,
    PagingOptions,
    SortDirection,
)

WHERE_PREFIX = "where."
PAGE_KEYS = ("page", "pageSize", "page_size")
ORDERED_TYPES = (int, float, Decimal, datetime, date, time)


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


@lru_cache(maxsize=None)
def entity_field_types(entity_type: type) -> dict[str, Any]:
    """Map each field of a dataclass entity to its annotation, Optional removed."""
    hints = get_type_hints(entity_type)
    return {
        name: _unwrap_optional(hints[name])
        for name in entity_type.__dataclass_fields__
    }


@lru_cache(maxsize=None)
def nullable_fields(entity_type: type) -> frozenset[str]:
    """Fields of a dataclass entity whose annotation admits None."""
    hints = get_type_hints(entity_type)
    return frozenset(
        name
        for name in entity_type.__dataclass_fields__
        if type(None) in get_args(hints[name])
    )


@lru_cache(maxsize=None)
def _adapter(annotation: Any) -> TypeAdapter:
    return TypeAdapter(annotation)


def _coerce(entity_type: type, field_name: str, value: Any) -> Any:
    if value is None and field_name in nullable_fields(entity_type):
        return None
    annotation = entity_field_types(entity_type)[field_name]
    try:
        return _adapter(annotation).validate_python(value)
    except ValidationError as exc:
        reason = exc.errors()[0]["msg"] if exc.errors() else str(exc)
        raise MalformedFilterException(
            f"Invalid value {value!r} for {entity_type.__name__}.{field_name}: {reason}"
        ) from exc


def validate_fields(entity_type: type, names: Any) -> None:
    """
    Ensure every name belongs to the entity.

    Raises:
        MalformedFilterException: If any name is not a field of ``entity_type``
    """
    known = entity_field_types(entity_type)
    unknown = sorted(str(name) for name in names if name not in known)
    if unknown:
        raise MalformedFilterException(
            f"Unknown field(s) for {entity_type.__name__}: {', '.join(unknown)}"
        )


def validate_options(entity_type: type, options: Optional[FilterOptions]) -> None:
    """
    Check that options only reference existing fields and that range
    operators are only applied to ordered (numeric or temporal) fields.

    Raises:
        MalformedFilterException: On the first violation found
    """
    if options is None:
        return

    validate_fields(entity_type, options.referenced_fields())

    field_types = entity_field_types(entity_type)
    for name, constraint in (options.where or {}).items():
        if not isinstance(constraint, FieldOperators) or not constraint.has_range:
            continue
        annotation = field_types[name]
        ordered = (
            isinstance(annotation, type)
            and issubclass(annotation, ORDERED_TYPES)
            and not issubclass(annotation, bool)
        )
        if not ordered:
            raise MalformedFilterException(
                f"Range operators are not supported on {entity_type.__name__}.{name}; "
                "use 'in'/'nin' or equality"
            )


def _split(value: Any) -> list[str]:
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [item.strip() for item in str(value).split(",") if item.strip()]


def _parse_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise MalformedFilterException(f"'{key}' must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise MalformedFilterException(f"'{key}' must be an integer, got {value!r}") from exc


def _parse_select(value: Any) -> list[str]:
    names = _split(value)
    if not names:
        raise MalformedFilterException("'select' must name at least one field")
    return names


def _parse_order_token(token: str) -> OrderBy:
    if ":" in token:
        name, _, direction = token.partition(":")
        return OrderBy(name.strip(), SortDirection.parse(direction))
    if token.startswith("-"):
        return OrderBy(token[1:], SortDirection.DESC)
    return OrderBy(token.lstrip("+"))


def _parse_order(value: Any) -> list[OrderBy]:
    if isinstance(value, list):
        return [
            _parse_order_token(entry) if isinstance(entry, str) else OrderBy.coerce(entry)
            for entry in value
        ]
    return [_parse_order_token(token) for token in _split(value)]


def _load_json_filter(raw: Any) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)
    try:
        loaded = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedFilterException(f"'filter' is not valid JSON: {exc}") from exc
    if not isinstance(loaded, dict):
        raise MalformedFilterException("'filter' must be a JSON object")
    return loaded


def _flat_where(key: str, value: Any, where: dict[str, Any]) -> None:
    parts = key[len(WHERE_PREFIX):].split(".")
    if len(parts) == 1 and parts[0]:
        where[parts[0]] = value
        return
    if len(parts) == 2 and parts[0] and parts[1] in OPERATORS:
        name, operator = parts
        operators = where.setdefault(name, {})
        if not isinstance(operators, dict):
            raise MalformedFilterException(
                f"Field '{name}' has both an equality and an operator constraint"
            )
        operators[operator] = _split(value) if operator in SET_OPERATORS else value
        return
    raise MalformedFilterException(
        f"Invalid filter key '{key}'; expected where.<field> or "
        f"where.<field>.<{'|'.join(OPERATORS)}>"
    )


def _coerce_where(entity_type: type, where: dict[str, Any]) -> dict[str, Any]:
    validate_fields(entity_type, where)

    coerced: dict[str, Any] = {}
    for name, constraint in where.items():
        if isinstance(constraint, Mapping):
            operators = FieldOperators.from_mapping(constraint)
            values = {}
            for operator, operand in operators.items():
                if operator in SET_OPERATORS:
                    values[operator] = [_coerce(entity_type, name, item) for item in operand]
                else:
                    values[operator] = _coerce(entity_type, name, operand)
            coerced[name] = FieldOperators.from_mapping(values)
        else:
            coerced[name] = _coerce(entity_type, name, constraint)
    return coerced


def _parse(entity_type: type, params: Mapping[str, Any], allow_paging: bool) -> dict[str, Any]:
    raw = dict(params)
    nested = _load_json_filter(raw.pop("filter")) if "filter" in raw else {}

    parsed: dict[str, Any] = {}
    where: dict[str, Any] = {}

    for key, value in nested.items():
        if key == "where":
            if not isinstance(value, Mapping):
                raise MalformedFilterException("'where' must be an object")
            where.update(value)
        elif key == "select":
            parsed["select"] = _parse_select(value)
        elif key == "order":
            parsed["order"] = _parse_order(value)
        elif key in PAGE_KEYS and allow_paging:
            parsed["page" if key == "page" else "page_size"] = _parse_int(key, value)
        else:
            raise MalformedFilterException(f"Unknown filter option '{key}'")

    for key, value in raw.items():
        if key.startswith(WHERE_PREFIX):
            _flat_where(key, value, where)
        elif key == "select":
            parsed["select"] = _parse_select(value)
        elif key == "order":
            parsed["order"] = _parse_order(value)
        elif key in PAGE_KEYS and allow_paging:
            parsed["page" if key == "page" else "page_size"] = _parse_int(key, value)
        else:
            raise MalformedFilterException(f"Unknown query parameter '{key}'")

    if where:
        parsed["where"] = _coerce_where(entity_type, where)
    return parsed


def parse_filter_query(
    entity_type: type, params: Optional[Mapping[str, Any]]
) -> Optional[FilterOptions]:
    """
    Parse flat query parameters into FilterOptions for ``entity_type``.

    Returns:
        FilterOptions, or None when ``params`` is empty

    Raises:
        MalformedFilterException: If any key or value cannot be parsed
    """
    if not params:
        return None
    options = FilterOptions(**_parse(entity_type, params, allow_paging=False))
    validate_options(entity_type, options)
    return options


def parse_paging_query(
    entity_type: type, params: Optional[Mapping[str, Any]]
) -> Optional[PagingOptions]:
    """
    Parse flat query parameters into PagingOptions for ``entity_type``.

    Returns:
        PagingOptions, or None when ``params`` is empty

    Raises:
        MalformedFilterException: If any key or value cannot be parsed
    """
    if not params:
        return None
    options = PagingOptions(**_parse(entity_type, params, allow_paging=True))
    validate_options(entity_type, options)
    return options
