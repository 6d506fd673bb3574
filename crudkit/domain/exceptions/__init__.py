"""Domain exceptions - entity and query rule violations."""

from crudkit.domain.exceptions.domain_exceptions import (
    DomainException,
    InvalidEntityStateException,
    MalformedFilterException,
)

__all__ = [
    "DomainException",
    "InvalidEntityStateException",
    "MalformedFilterException",
]
