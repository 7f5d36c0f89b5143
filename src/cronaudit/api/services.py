"""业务逻辑服务层

作为路由和数据访问层之间的中间层，负责数据转换与分页计算。
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

from .repositories import AuditLogRepository
from .schemas import (
    AuditLogFilters,
    AuditLogResponse,
    JobInfo,
    JobsResponse,
    PaginatedAuditLogsResponse,
    PaginationInfo,
)


class AuditLogService:
    """审计日志业务逻辑服务"""

    def __init__(self, repository: Optional[AuditLogRepository] = None):
        self.repository = repository or AuditLogRepository()

    def get_logs_paginated(
        self, filters: AuditLogFilters
    ) -> PaginatedAuditLogsResponse:
        rows, total_count = self.repository.get_logs_paginated(filters)

        total_pages = math.ceil(total_count / filters.limit) if total_count > 0 else 1

        return PaginatedAuditLogsResponse(
            data=[AuditLogResponse.model_validate(row) for row in rows],
            pagination=PaginationInfo(
                current_page=filters.page,
                total_pages=total_pages,
                total_items=total_count,
                per_page=filters.limit,
                has_next=filters.page < total_pages,
                has_prev=filters.page > 1,
            ),
        )

    def list_jobs(self, snapshot: Dict[str, Dict[str, Any]]) -> JobsResponse:
        """合并调度器快照与最近一次审计日志"""
        jobs = []
        for job_id, info in sorted(snapshot.items()):
            latest = self.repository.get_latest_by_name(job_id)
            jobs.append(
                JobInfo(
                    name=info.get("name") or job_id,
                    schedule=info.get("schedule"),
                    next_run_at=info.get("next_run_at"),
                    last_status=latest["execution_status"] if latest else None,
                    last_run_at=latest["start_date_time"] if latest else None,
                )
            )
        return JobsResponse(jobs=jobs)
