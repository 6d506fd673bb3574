"""Domain layer exceptions for invalid entities and malformed queries."""


class DomainException(Exception):
    """
    Base exception for domain layer.

    Domain exceptions represent violations of the rules that entities and
    query options must satisfy, independent of any storage or transport.

    Examples:
        - Invalid entity state
        - Filter predicates referencing unknown fields or operators
    """

    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR"):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
        """
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class InvalidEntityStateException(DomainException):
    """Raised when an entity is in an invalid state."""

    def __init__(self, message: str):
        super().__init__(message, error_code="INVALID_ENTITY_STATE")


class MalformedFilterException(DomainException):
    """
    Raised when filter, paging or update input cannot be turned into valid options.

    A malformed filter must never degrade into "match all"; callers get this
    error with a description of the offending key or value instead.
    """

    def __init__(self, message: str):
        super().__init__(message, error_code="MALFORMED_FILTER")
