"""Request/response schemas derived from dataclass entities.

The router factory needs pydantic models to validate bodies and shape
responses. Instead of hand-writing three DTOs per entity, they are derived
from the entity's dataclass fields:

- ``Create<Entity>``: every init field except the identifier; fields without
  a default are required
- ``Update<Entity>``: every field except the identifier, none required; only
  fields the client actually sent are applied (``exclude_unset``), and null
  is rejected for fields whose annotation is not Optional
- ``<Entity>``: read model, all fields optional so projections serialise
"""

import dataclasses
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, get_type_hints

from pydantic import BaseModel, ConfigDict, Field, create_model

from crudkit.application.services.filter_parser import entity_field_types


@dataclass(frozen=True)
class EntitySchemas:
    """Pydantic models and identifier type derived from one entity type."""

    create: type[BaseModel]
    update: type[BaseModel]
    read: type[BaseModel]
    id_type: Any


@lru_cache(maxsize=None)
def entity_schemas(entity_type: type, id_field: str = "id") -> EntitySchemas:
    """
    Derive create/update/read models for a dataclass entity.

    Args:
        entity_type: Dataclass entity type
        id_field: Name of the identifier field

    Returns:
        EntitySchemas for ``entity_type``

    Raises:
        ValueError: If ``id_field`` is not a field of the entity
    """
    hints = get_type_hints(entity_type)
    if id_field not in hints:
        raise ValueError(f"{entity_type.__name__} has no identifier field '{id_field}'")

    create_fields: dict[str, Any] = {}
    update_fields: dict[str, Any] = {}
    read_fields: dict[str, Any] = {}

    for f in dataclasses.fields(entity_type):
        annotation = hints[f.name]
        read_fields[f.name] = (Optional[annotation], None)
        if f.name == id_field:
            continue
        # Unset fields default to None without validation; an explicit null
        # is only accepted where the annotation is Optional
        update_fields[f.name] = (annotation, None)
        if not f.init:
            continue
        if f.default is not dataclasses.MISSING:
            create_fields[f.name] = (annotation, f.default)
        elif f.default_factory is not dataclasses.MISSING:
            create_fields[f.name] = (annotation, Field(default_factory=f.default_factory))
        else:
            create_fields[f.name] = (annotation, ...)

    name = entity_type.__name__
    return EntitySchemas(
        create=create_model(f"Create{name}", **create_fields),
        update=create_model(f"Update{name}", **update_fields),
        read=create_model(
            name,
            __config__=ConfigDict(from_attributes=True),
            **read_fields,
        ),
        id_type=entity_field_types(entity_type)[id_field],
    )
