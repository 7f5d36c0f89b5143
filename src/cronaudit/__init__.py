"""cronaudit: scheduled task execution with retries and audit logging.

Primary entrypoints:
- ExecutionWrapper: runs one firing and writes exactly one AuditRecord.
- CronScheduler: binds wrappers to cron expressions.
- AuditSink implementations: NoopAuditSink, SqlAlchemyAuditSink, DocumentAuditSink.
"""

from .execution import (
    CompleteEvent,
    ExecutionWrapper,
    FailureEvent,
    LifecycleEvents,
    RetryController,
    RetryOutcome,
    RetryPolicy,
    SuccessEvent,
)
from .models import AuditRecord, ExecutionStatus
from .scheduling import CronScheduler
from .sinks import AuditSink, DocumentAuditSink, NoopAuditSink, SqlAlchemyAuditSink

__all__ = [
    "AuditRecord",
    "ExecutionStatus",
    "ExecutionWrapper",
    "RetryController",
    "RetryOutcome",
    "RetryPolicy",
    "LifecycleEvents",
    "SuccessEvent",
    "FailureEvent",
    "CompleteEvent",
    "CronScheduler",
    "AuditSink",
    "NoopAuditSink",
    "SqlAlchemyAuditSink",
    "DocumentAuditSink",
]
