"""Exception handlers for converting exceptions to HTTP responses.

Instead of creating individual handlers for each exception, base exception
handlers determine the HTTP status code from the error_code attribute.

To add a new exception:
1. Create the exception class (inheriting from ApplicationError or DomainException)
2. Add its error_code to ERROR_CODE_TO_HTTP_STATUS in error_codes.py

Storage errors are never translated by the CRUD components; they reach
these handlers unchanged.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from crudkit.application.exceptions import ApplicationError
from crudkit.domain.exceptions import DomainException
from crudkit.presentation.error_codes import get_http_status_for_error_code

logger = logging.getLogger(__name__)


def _error_response(message: str, error_code: str) -> JSONResponse:
    return JSONResponse(
        status_code=get_http_status_for_error_code(error_code),
        content={
            "detail": message,
            "error_code": error_code,
        },
    )


async def application_error_handler(
    request: Request, exc: ApplicationError
) -> JSONResponse:
    """
    Handle ALL application layer exceptions.

    The HTTP status code is determined by the error_code attribute
    using the ERROR_CODE_TO_HTTP_STATUS mapping.
    """
    return _error_response(exc.message, exc.error_code)


async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """
    Handle ALL domain layer exceptions (invalid entities, malformed filters).

    The HTTP status code is determined by the error_code attribute.
    """
    return _error_response(exc.message, exc.error_code)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors from request data.

    Returns a list of all validation errors with field locations and messages.
    """
    validation_errors = [
        {
            # Field path, e.g. "body.name" or "path.id"
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation failed",
            "error_code": "VALIDATION_ERROR",
            "errors": validation_errors,
        },
    )


async def integrity_error_handler(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """Handle constraint violations (unique, not-null, foreign key)."""
    logger.warning("Constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)

    return _error_response("The request violates a storage constraint", "CONSTRAINT_VIOLATION")


async def database_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """
    Handle database errors.

    Catches SQLAlchemy exceptions and returns a standardized error response
    without exposing internal database details.
    """
    logger.error(f"Database error: {exc}", exc_info=True)

    return _error_response("An internal database error occurred", "DATABASE_ERROR")


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle all other unhandled exceptions.

    This is the catch-all handler for any unexpected errors.
    """
    logger.error(f"Unhandled error: {exc}", exc_info=True)

    return _error_response("An internal server error occurred", "INTERNAL_SERVER_ERROR")
