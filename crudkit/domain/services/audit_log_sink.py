"""Audit log sink interface - domain service abstraction.

Components that mutate entities can report what they did to an audit log.
The domain only cares that an entry can be submitted; whether it ends up in
a database table, a message queue or a file is an infrastructure decision.
"""

from abc import ABC, abstractmethod
from typing import Any

from crudkit.domain.entities.audit_log import AuditLog


class IAuditLogSink(ABC):
    """
    Interface for submitting audit entries.

    The return value of ``create`` is never consulted by callers. A
    ``CrudService[AuditLog]`` satisfies this contract as-is.
    """

    @abstractmethod
    async def create(self, entry: AuditLog) -> Any:
        """
        Record one audit entry.

        Args:
            entry: The entry to store
        """
        pass
