"""Application layer exceptions."""

from crudkit.application.exceptions.exceptions import (
    ApplicationError,
    EntityNotFoundError,
)

__all__ = ["ApplicationError", "EntityNotFoundError"]
