"""审计存储实现集合

- AuditSink: 执行包装器依赖的能力接口
- NoopAuditSink: 丢弃记录
- SqlAlchemyAuditSink: 关系表插入
- DocumentAuditSink: 文档集合插入
"""

from .base import AuditSink
from .document import DocumentAuditSink
from .noop import NoopAuditSink
from .sqlalchemy_sink import SqlAlchemyAuditSink

__all__ = [
    "AuditSink",
    "NoopAuditSink",
    "SqlAlchemyAuditSink",
    "DocumentAuditSink",
]
