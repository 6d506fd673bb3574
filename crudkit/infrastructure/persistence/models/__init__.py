"""ORM models. Importing this package registers every table on Base.metadata."""

from crudkit.infrastructure.persistence.models.audit_log_model import AuditLogModel
from crudkit.infrastructure.persistence.models.resident_model import ResidentModel

__all__ = ["AuditLogModel", "ResidentModel"]
