"""Domain entities."""

from crudkit.domain.entities.audit_log import AuditLog
from crudkit.domain.entities.resident import Resident

__all__ = ["AuditLog", "Resident"]
