"""Audit services package."""

from haven.services.audit.recorder import AuditRecorder, AuditSink, DatabaseAuditSink
from haven.services.audit.access_history import AccessHistoryService

__all__ = [
    "AuditRecorder",
    "AuditSink",
    "DatabaseAuditSink",
    "AccessHistoryService",
]
