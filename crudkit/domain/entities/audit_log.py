"""Audit log entity - write-only record of a mutating operation."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Optional


@dataclass
class AuditLog:
    """
    One audit entry.

    ``action`` names the operation and the entity type, e.g. "Create Resident".
    """

    action: str
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    id: Optional[int] = None

    @classmethod
    def for_operation(cls, operation: str, entity_type: type) -> "AuditLog":
        """Build the entry for ``operation`` ("Create", "Update", ...) on ``entity_type``."""
        return cls(action=f"{operation} {entity_type.__name__}")
