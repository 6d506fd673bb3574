"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from crudkit.application.exceptions import ApplicationError
from crudkit.domain.exceptions import DomainException
from crudkit.infrastructure.config.logging_config import setup_logging
from crudkit.infrastructure.config.settings import Settings, get_settings
from crudkit.presentation import dependencies
from crudkit.presentation.api.v1 import audit_logs, residents
from crudkit.presentation.exception_handlers import (
    application_error_handler,
    database_error_handler,
    domain_exception_handler,
    generic_exception_handler,
    integrity_error_handler,
    validation_error_handler,
)

logger = logging.getLogger(__name__)

# Get settings for app configuration
_settings = get_settings()
setup_logging(_settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup; flush audit entries and close the engine on shutdown."""
    logger.info("Starting %s (%s)", _settings.app_name, _settings.environment)
    await dependencies.startup(_settings)
    yield
    await dependencies.shutdown()
    logger.info("Stopped %s", _settings.app_name)


app = FastAPI(
    title=_settings.app_name,
    description="Entity-parameterized CRUD services exposed over HTTP",
    version=_settings.app_version,
    debug=_settings.debug,
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
# - ApplicationError handles ALL application layer exceptions (EntityNotFoundError, ...)
# - DomainException handles ALL domain layer exceptions (malformed filters, invalid state)
# - RequestValidationError handles Pydantic validation errors
# - IntegrityError must be registered next to its base SQLAlchemyError
# - Exception handles everything else
app.add_exception_handler(ApplicationError, application_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(DomainException, domain_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(IntegrityError, integrity_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(SQLAlchemyError, database_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, generic_exception_handler)

# Include routers
app.include_router(residents.router, prefix=_settings.api_prefix)
app.include_router(audit_logs.router, prefix=_settings.api_prefix)


@app.get("/")
async def root() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "message": _settings.app_name,
        "status": "running",
        "version": _settings.app_version,
        "environment": _settings.environment,
    }


@app.get("/config")
async def show_config(settings: Settings = Depends(get_settings)) -> dict[str, str | int | bool | list[str]]:
    """Show current configuration (non-sensitive data only)."""
    return {
        "environment": settings.environment,
        "app_name": settings.app_name,
        "app_version": settings.app_version,
        "debug": settings.debug,
        "cors_origins": settings.cors_origins_list,
        "default_page_size": settings.default_page_size,
    }
