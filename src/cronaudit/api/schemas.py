"""API 响应模型定义

本模块定义了 cronaudit API 的请求和响应模型，使用 Pydantic 实现数据验证和序列化。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite 不保存时区，审计时间统一按 UTC 写入
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuditLogResponse(BaseModel):
    """审计日志响应模型"""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="审计日志ID")
    cron_name: str = Field(..., description="调度任务名称")
    start_date_time: datetime = Field(..., description="开始时间")
    end_date_time: datetime = Field(..., description="结束时间")
    execution_status: str = Field(..., description="执行状态：Success/Failure")
    remarks: Optional[str] = Field(None, description="失败原因")
    batch_size: int = Field(0, description="批量大小")

    @field_validator("start_date_time", "end_date_time")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class PaginationInfo(BaseModel):
    """分页信息模型"""

    current_page: int = Field(..., description="当前页码")
    total_pages: int = Field(..., description="总页数")
    total_items: int = Field(..., description="总条目数")
    per_page: int = Field(..., description="每页条数")
    has_next: bool = Field(..., description="是否有下一页")
    has_prev: bool = Field(..., description="是否有上一页")


class PaginatedAuditLogsResponse(BaseModel):
    """分页审计日志响应模型"""

    data: List[AuditLogResponse] = Field(..., description="审计日志列表")
    pagination: PaginationInfo = Field(..., description="分页信息")


class AuditLogFilters(BaseModel):
    """审计日志筛选参数模型"""

    page: int = Field(1, ge=1, description="页码")
    limit: int = Field(20, ge=1, le=100, description="每页条数")
    name: Optional[str] = Field(None, description="任务名称筛选")
    status: Optional[Literal["Success", "Failure"]] = Field(
        None, description="执行状态筛选"
    )


class JobInfo(BaseModel):
    """调度任务信息模型"""

    name: str = Field(..., description="任务名称")
    schedule: Optional[str] = Field(None, description="crontab 表达式")
    next_run_at: Optional[datetime] = Field(None, description="下次执行时间")
    last_status: Optional[str] = Field(None, description="最近一次执行状态")
    last_run_at: Optional[datetime] = Field(None, description="最近一次开始时间")

    @field_validator("next_run_at", "last_run_at")
    @classmethod
    def ensure_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)


class JobsResponse(BaseModel):
    """调度任务列表响应模型"""

    jobs: List[JobInfo] = Field(..., description="任务列表")


class RunJobResponse(BaseModel):
    """手动触发响应模型"""

    status: str = Field(..., description="执行状态")
    message: str = Field(..., description="执行信息")
