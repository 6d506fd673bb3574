"""Audit log API endpoints (read-only)."""

from crudkit.domain.entities.audit_log import AuditLog
from crudkit.presentation.controllers.crud_controller import CrudRouteOptions
from crudkit.presentation.dependencies import get_audit_log_service
from crudkit.presentation.routing import create_crud_router

# Entries are written by the audit trail only
router = create_crud_router(
    AuditLog,
    get_audit_log_service,
    CrudRouteOptions(
        list="List audit entries",
        find_one=False,
        create=False,
        update=False,
        delete_by_id=False,
    ),
    prefix="/audit-logs",
    tags=["audit-logs"],
)
