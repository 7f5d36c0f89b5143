"""数据访问层实现

本模块实现了审计日志的数据库访问层，使用 Repository 模式封装数据操作。
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import desc, func, select

from ..models.audit_log import DEFAULT_TABLE_NAME, DatabaseManager
from .schemas import AuditLogFilters


class AuditLogRepository:
    """审计日志数据访问层

    Args:
        db_manager: 数据库管理器实例，如果为None则使用默认实例
        table_name: 审计表名，与审计存储的配置保持一致
    """

    def __init__(
        self,
        db_manager: Optional[DatabaseManager] = None,
        table_name: str = DEFAULT_TABLE_NAME,
    ):
        self.db_manager = db_manager or DatabaseManager.get_instance()
        self.table = self.db_manager.ensure_table(table_name)

    def get_logs_paginated(
        self, filters: AuditLogFilters
    ) -> Tuple[List[Dict[str, Any]], int]:
        """获取分页审计日志，按开始时间倒序

        Returns:
            Tuple[List[Dict[str, Any]], int]: (审计日志行列表, 总数量)
        """
        conditions = []
        if filters.name:
            conditions.append(self.table.c.cron_name == filters.name)
        if filters.status:
            conditions.append(self.table.c.execution_status == filters.status)

        with self.db_manager.get_session() as session:
            count_stmt = select(func.count()).select_from(self.table).where(*conditions)
            total_count = session.execute(count_stmt).scalar_one()

            offset = (filters.page - 1) * filters.limit
            stmt = (
                select(self.table)
                .where(*conditions)
                .order_by(desc(self.table.c.start_date_time), desc(self.table.c.id))
                .offset(offset)
                .limit(filters.limit)
            )
            rows = [dict(row) for row in session.execute(stmt).mappings().all()]

        return rows, total_count

    def get_latest_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        """获取指定任务最近一次审计日志"""
        with self.db_manager.get_session() as session:
            stmt = (
                select(self.table)
                .where(self.table.c.cron_name == name)
                .order_by(desc(self.table.c.start_date_time), desc(self.table.c.id))
                .limit(1)
            )
            row = session.execute(stmt).mappings().first()
            return dict(row) if row is not None else None
