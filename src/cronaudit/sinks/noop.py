from __future__ import annotations

import logging

from ..models.audit import AuditRecord

logger = logging.getLogger("cronaudit.sinks.noop")


class NoopAuditSink:
    """占位审计存储，丢弃所有记录，仅输出调试日志"""

    async def log(self, record: AuditRecord) -> None:
        logger.debug(
            "[NoopAuditSink] 丢弃审计记录 name=%s status=%s",
            record.name,
            record.status.value,
        )
