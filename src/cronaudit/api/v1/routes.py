"""API v1 路由定义。

此模块包含 cronaudit API v1 版本提供的所有 FastAPI 路由端点。
"""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...config.settings import get_settings
from ...models.audit_log import DatabaseManager
from ...scheduling import JobAlreadyRunningError
from ...state import get_scheduler
from ..repositories import AuditLogRepository
from ..schemas import (
    AuditLogFilters,
    JobsResponse,
    PaginatedAuditLogsResponse,
    RunJobResponse,
)
from ..services import AuditLogService

router = APIRouter(prefix="/api/v1", tags=["audit"])


def get_audit_log_service() -> AuditLogService:
    """依赖注入：获取审计日志服务实例"""

    storage = get_settings().storage
    repository = AuditLogRepository(
        DatabaseManager.get_instance(storage.db_path),
        table_name=storage.table_name,
    )
    return AuditLogService(repository)


@router.get(
    "/audit-logs",
    response_model=PaginatedAuditLogsResponse,
    summary="获取审计日志列表",
    description="获取分页的审计日志，支持任务名称和执行状态筛选，按开始时间倒序",
)
async def get_audit_logs(
    page: int = Query(1, ge=1, description="页码"),
    limit: int = Query(20, ge=1, le=100, description="每页条数"),
    name: Optional[str] = Query(None, description="任务名称筛选"),
    status_filter: Optional[Literal["Success", "Failure"]] = Query(
        None, alias="status", description="执行状态筛选"
    ),
    service: AuditLogService = Depends(get_audit_log_service),
):
    """获取分页审计日志"""

    try:
        filters = AuditLogFilters(
            page=page, limit=limit, name=name, status=status_filter
        )
        return service.get_logs_paginated(filters)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"获取审计日志失败: {exc}",
        ) from exc


@router.get(
    "/jobs",
    response_model=JobsResponse,
    summary="获取调度任务列表",
)
async def get_jobs(service: AuditLogService = Depends(get_audit_log_service)):
    """获取已注册的调度任务及其最近一次执行状态"""

    scheduler = get_scheduler()
    if scheduler is None:
        return JobsResponse(jobs=[])

    try:
        return service.list_jobs(scheduler.get_jobs_snapshot())
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"获取调度任务失败: {exc}",
        ) from exc


@router.post(
    "/jobs/{name}/run",
    response_model=RunJobResponse,
    summary="手动触发调度任务",
    description="立即执行一次指定任务，执行结果同样写入审计日志",
)
async def run_job(name: str):
    """手动触发调度任务"""

    scheduler = get_scheduler()
    if scheduler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="调度器未运行",
        )

    try:
        await scheduler.run_now(name)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"调度任务 {name} 不存在",
        ) from exc
    except JobAlreadyRunningError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"调度任务 {name} 正在执行",
        ) from exc
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"手动触发任务失败: {exc}",
        ) from exc

    return RunJobResponse(status="success", message=f"Successfully triggered job {name}")
