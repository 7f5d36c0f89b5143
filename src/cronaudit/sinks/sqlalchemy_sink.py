"""关系数据库审计存储

通过 SQLAlchemy 向审计表插入一行（六列：名称、开始、结束、状态、备注、批量大小）。
阻塞的数据库写入放到工作线程中执行，避免阻塞事件循环。
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy import insert

from ..models.audit import AuditRecord
from ..models.audit_log import DEFAULT_TABLE_NAME, DatabaseManager

logger = logging.getLogger("cronaudit.sinks.sqlalchemy")

_COLUMNS = (
    "cron_name",
    "start_date_time",
    "end_date_time",
    "execution_status",
    "remarks",
    "batch_size",
)


class SqlAlchemyAuditSink:
    """SQLAlchemy 审计存储

    Args:
        db_manager: 数据库管理器，为 None 时使用默认单例
        table_name: 目标表名，默认 cron_audit_logs
        raise_errors: 写入失败时是否抛出异常；默认仅记录错误日志
    """

    def __init__(
        self,
        db_manager: DatabaseManager | None = None,
        table_name: str = DEFAULT_TABLE_NAME,
        raise_errors: bool = False,
    ):
        self.db_manager = db_manager or DatabaseManager.get_instance()
        self.table_name = table_name
        self.raise_errors = raise_errors
        self.table = self.db_manager.ensure_table(table_name)

    async def log(self, record: AuditRecord) -> None:
        try:
            await asyncio.to_thread(self._insert, record)
            logger.info(
                "[SqlAlchemyAuditSink] 审计记录保存成功 name=%s table=%s",
                record.name,
                self.table_name,
            )
        except Exception as e:
            logger.error(
                "[SqlAlchemyAuditSink] 审计记录保存失败 name=%s error=%s",
                record.name,
                e,
            )
            if self.raise_errors:
                raise

    def _insert(self, record: AuditRecord) -> None:
        values = dict(zip(_COLUMNS, record.to_row()))
        session = self.db_manager.get_session()
        try:
            session.execute(insert(self.table).values(**values))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
