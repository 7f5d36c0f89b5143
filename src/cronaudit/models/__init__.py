from .audit import AuditRecord, ExecutionStatus
from .audit_log import Base, CronAuditLog, DatabaseManager, audit_table

__all__ = [
    "AuditRecord",
    "ExecutionStatus",
    "Base",
    "CronAuditLog",
    "DatabaseManager",
    "audit_table",
]
