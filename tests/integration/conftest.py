"""Integration test fixtures.

Provides fixtures for integration testing with real database and FastAPI client.
Uses a throwaway SQLite file per test; each session opens its own connection,
as the count and the page query of a list request run concurrently.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from crudkit.application.services.audit_trail import AuditTrail
from crudkit.application.services.crud_service import CrudService
from crudkit.domain.entities.audit_log import AuditLog
from crudkit.domain.entities.resident import Resident
from crudkit.infrastructure.persistence.database import Base
from crudkit.infrastructure.persistence.models import AuditLogModel, ResidentModel
from crudkit.infrastructure.repositories.sqlalchemy_repository import SQLAlchemyRepository
from crudkit.main import app
from crudkit.presentation.dependencies import get_audit_trail, get_session_factory


@pytest_asyncio.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine]:
    """Create a test database engine on a temporary SQLite file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        poolclass=NullPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables after test
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine: AsyncEngine):
    """Create a test session factory."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest.fixture
def resident_repository(test_session_factory) -> SQLAlchemyRepository[Resident]:
    """Provide the real Resident repository over the test database."""
    return SQLAlchemyRepository(test_session_factory, ResidentModel, Resident)


@pytest.fixture
def audit_log_service(test_session_factory) -> CrudService[AuditLog]:
    """Provide the AuditLog data-access component over the test database."""
    return CrudService(
        AuditLog, SQLAlchemyRepository(test_session_factory, AuditLogModel, AuditLog)
    )


@pytest.fixture
def client(test_session_factory, audit_trail) -> Generator[TestClient]:
    """
    Create a FastAPI test client with test database.

    This client uses the real application but with a throwaway database.
    Audit entries go to the in-memory FakeAuditLogSink behind ``audit_trail``.
    """

    # Override the session factory and audit trail dependencies
    def override_get_session_factory():
        return test_session_factory

    app.dependency_overrides[get_session_factory] = override_get_session_factory
    app.dependency_overrides[get_audit_trail] = lambda: audit_trail

    with TestClient(app) as test_client:
        yield test_client

    # Clean up overrides
    app.dependency_overrides.clear()


@pytest.fixture
def persisted_audit_trail(audit_log_service) -> AuditTrail:
    """Provide an AuditTrail that stores entries in the audit_logs table."""
    return AuditTrail(audit_log_service)
