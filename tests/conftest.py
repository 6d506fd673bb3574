"""Pytest configuration and fixtures.

This file contains shared fixtures that can be used across all tests.

These fixtures follow the Dependency Inversion Principle:
- Use fake implementations (FakeRepository, FakeAuditLogSink)
- Tests run fast (no database)
- Tests are isolated (each test gets fresh fakes)
"""

import os

# Settings are read once at import time of the application; point them at a
# throwaway database before anything imports crudkit.main
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import UTC, datetime  # noqa: E402

import pytest  # noqa: E402

from crudkit.application.services.audit_trail import AuditTrail  # noqa: E402
from crudkit.application.services.crud_service import CrudService  # noqa: E402
from crudkit.application.services.resident_service import ResidentService  # noqa: E402
from crudkit.domain.entities.resident import Resident  # noqa: E402
from crudkit.presentation.controllers.crud_controller import (  # noqa: E402
    AuditedCrudController,
    CrudController,
)
from tests.fakes import FakeAuditLogSink, FakeRepository  # noqa: E402


@pytest.fixture
def sample_resident() -> Resident:
    """Create a sample resident for testing."""
    return Resident(
        id=1,
        name="Alice",
        room="A1",
        age=34,
        phone="555-0101",
        created_at=datetime.now(UTC),
    )


@pytest.fixture
def residents() -> list[Resident]:
    """
    Create a small population of residents across three rooms.

    Ids are 1..6; Frank has no age.
    """
    return [
        Resident(id=1, name="Alice", room="A1", age=34),
        Resident(id=2, name="Bob", room="A1", age=71),
        Resident(id=3, name="Carol", room="B2", age=52),
        Resident(id=4, name="Dave", room="B2", age=19),
        Resident(id=5, name="Erin", room="C3", age=88),
        Resident(id=6, name="Frank", room="C3"),
    ]


@pytest.fixture
def fake_repository() -> FakeRepository[Resident]:
    """
    Provide a fresh, empty FakeRepository for each test.

    This ensures tests are isolated and don't affect each other.
    """
    return FakeRepository(Resident)


@pytest.fixture
def fake_repository_with_residents(residents) -> FakeRepository[Resident]:
    """Provide a FakeRepository pre-populated with residents."""
    return FakeRepository(Resident, initial_data=residents)


@pytest.fixture
def resident_service(fake_repository) -> ResidentService:
    """
    Provide a ResidentService over an empty fake repository.

    This allows testing the service layer in isolation, without a database.
    """
    return ResidentService(Resident, fake_repository)


@pytest.fixture
def resident_service_with_data(fake_repository_with_residents) -> ResidentService:
    """Provide a ResidentService with pre-populated data."""
    return ResidentService(Resident, fake_repository_with_residents)


@pytest.fixture
def fake_audit_sink() -> FakeAuditLogSink:
    """Provide a FakeAuditLogSink that records every entry."""
    return FakeAuditLogSink()


@pytest.fixture
def audit_trail(fake_audit_sink) -> AuditTrail:
    """Provide an AuditTrail submitting to the fake sink."""
    return AuditTrail(fake_audit_sink)


@pytest.fixture
def resident_controller(resident_service_with_data: CrudService[Resident]) -> CrudController[Resident]:
    """Provide a plain CrudController over pre-populated residents."""
    return CrudController(resident_service_with_data)


@pytest.fixture
def audited_resident_controller(
    resident_service_with_data: CrudService[Resident], audit_trail: AuditTrail
) -> AuditedCrudController[Resident]:
    """Provide an AuditedCrudController over pre-populated residents."""
    return AuditedCrudController(resident_service_with_data, audit_trail)
