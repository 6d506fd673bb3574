"""Audit trail - fire-and-forget submission of audit entries.

Mutating endpoints of the audited controller call ``record`` before they run
the mutation. Submission is scheduled on the running event loop and the
caller continues immediately, trading audit durability for request latency:

- exactly one entry per call, whether the mutation then succeeds or fails
- a failing submission is logged, never raised into the request
- ``drain`` waits for everything still in flight (used on shutdown)
"""

import asyncio
import logging

from crudkit.domain.entities.audit_log import AuditLog
from crudkit.domain.services.audit_log_sink import IAuditLogSink

logger = logging.getLogger(__name__)


class AuditTrail:
    """Submits audit entries to an IAuditLogSink without awaiting them."""

    def __init__(self, sink: IAuditLogSink):
        """
        Args:
            sink: Collaborator that stores entries (anything with ``async create(entry)``)
        """
        self._sink = sink
        # Strong references: the loop only keeps weak ones to scheduled tasks
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of submissions still in flight."""
        return len(self._pending)

    def record(self, operation: str, entity_type: type) -> AuditLog:
        """
        Build the entry for ``operation`` on ``entity_type`` and submit it.

        Must be called from a running event loop.

        Returns:
            The submitted entry
        """
        entry = AuditLog.for_operation(operation, entity_type)
        task = asyncio.get_running_loop().create_task(self._submit(entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return entry

    async def _submit(self, entry: AuditLog) -> None:
        try:
            await self._sink.create(entry)
        except Exception:
            logger.exception("Failed to record audit entry %r", entry.action)

    async def drain(self) -> None:
        """Wait until every pending submission has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
