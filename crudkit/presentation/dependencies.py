"""FastAPI dependency injection setup.

This module is the COMPOSITION ROOT - where we wire up dependencies.

This is where we decide:
- Use SQLAlchemyRepository (not an in-memory or document store)
- Use one CrudService per entity type, configured from Settings
- Store audit entries through the AuditLog entity's own CrudService

The application layer doesn't know about these choices - it only knows
about IRepository and IAuditLogSink.
"""

import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from crudkit.application.services.audit_trail import AuditTrail
from crudkit.application.services.crud_service import CrudService
from crudkit.application.services.resident_service import ResidentService
from crudkit.domain.entities.audit_log import AuditLog
from crudkit.domain.entities.resident import Resident
from crudkit.infrastructure.config.settings import Settings, get_settings
from crudkit.infrastructure.persistence.database import (
    create_database_engine,
    create_session_factory,
    create_tables,
)
from crudkit.infrastructure.persistence.models import AuditLogModel, ResidentModel
from crudkit.infrastructure.repositories.sqlalchemy_repository import SQLAlchemyRepository

logger = logging.getLogger(__name__)

# Module-level singletons (created once, reused throughout app lifecycle)
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None
_audit_trail: AuditTrail | None = None


def get_database_engine(settings: Settings = Depends(get_settings)) -> AsyncEngine:
    """Get or create database engine singleton.

    Args:
        settings: Application settings (injected)

    Returns:
        AsyncEngine instance
    """
    global _engine
    if _engine is None:
        _engine = create_database_engine(settings)
    return _engine


def get_session_factory(
    engine: AsyncEngine = Depends(get_database_engine),
) -> async_sessionmaker:
    """Get or create session factory singleton.

    Args:
        engine: Database engine (injected)

    Returns:
        Session factory
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(engine)
    return _session_factory


def get_resident_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    settings: Settings = Depends(get_settings),
) -> ResidentService:
    """
    Dependency that provides the Resident data-access component.

    Services are stateless, so building one per request is cheap; the
    session factory they draw from is the shared singleton.

    Note:
        In tests, override get_session_factory to point at a test database.
    """
    repository = SQLAlchemyRepository(session_factory, ResidentModel, Resident)
    return ResidentService(
        Resident, repository, default_page_size=settings.default_page_size
    )


def get_audit_log_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    settings: Settings = Depends(get_settings),
) -> CrudService[AuditLog]:
    """Dependency that provides the AuditLog data-access component."""
    repository = SQLAlchemyRepository(session_factory, AuditLogModel, AuditLog)
    return CrudService(AuditLog, repository, default_page_size=settings.default_page_size)


def get_audit_trail(
    audit_log_service: CrudService[AuditLog] = Depends(get_audit_log_service),
) -> AuditTrail:
    """
    Dependency that provides the audit trail.

    This is a SINGLETON: it tracks audit submissions still in flight so they
    can be awaited on shutdown.

    Note:
        In tests, override this dependency with an AuditTrail over a fake sink:

        app.dependency_overrides[get_audit_trail] = lambda: AuditTrail(FakeAuditLogSink())
    """
    global _audit_trail
    if _audit_trail is None:
        _audit_trail = AuditTrail(audit_log_service)
    return _audit_trail


async def startup(settings: Settings) -> None:
    """Prepare shared resources when the application starts."""
    if settings.db_create_tables:
        await create_tables(get_database_engine(settings))
        logger.info("Database tables ready")


async def shutdown() -> None:
    """Flush pending audit entries and release the engine."""
    global _engine, _session_factory, _audit_trail
    if _audit_trail is not None:
        await _audit_trail.drain()
        _audit_trail = None
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
