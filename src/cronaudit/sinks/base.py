"""审计存储接口

执行包装器只依赖 AuditSink 这一能力接口：一个异步的 log(record) 方法。
具体实现（空实现、关系数据库、文档数据库）互相独立，不共享基类状态。
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..models.audit import AuditRecord


@runtime_checkable
class AuditSink(Protocol):
    async def log(self, record: AuditRecord) -> None:
        """写入一条审计记录

        允许抛出 I/O 类异常；调用方会等待其完成（成功或失败）后再继续。
        """
        ...
