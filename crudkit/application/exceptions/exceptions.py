"""Application layer exceptions."""

from typing import Any


class ApplicationError(Exception):
    """Base application layer exception."""

    def __init__(self, message: str, error_code: str = "APPLICATION_ERROR"):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
        """
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class EntityNotFoundError(ApplicationError):
    """Raised when an entity looked up by identifier or filter does not exist."""

    def __init__(
        self,
        entity_name: str,
        entity_id: Any = None,
        message: str | None = None,
    ):
        self.entity_name = entity_name
        self.entity_id = entity_id
        if message is None:
            if entity_id is None:
                message = f"Not found {entity_name}"
            else:
                message = f"Not found {entity_name} with id {entity_id}"
        super().__init__(message, error_code="ENTITY_NOT_FOUND")
