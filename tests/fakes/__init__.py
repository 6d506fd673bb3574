"""Fake implementations for testing."""

from tests.fakes.audit_log_sink_fake import FakeAuditLogSink
from tests.fakes.repository_fake import FakeRepository

__all__ = ["FakeAuditLogSink", "FakeRepository"]
