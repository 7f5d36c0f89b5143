"""根据配置组装审计存储、执行包装器与调度器"""

from __future__ import annotations

import logging
from typing import List, Optional

from .config.settings import JobConfig, Settings, StorageConfig
from .execution.wrapper import ExecutionWrapper
from .models.audit_log import DatabaseManager
from .scheduling.scheduler import CronScheduler
from .sinks import AuditSink, NoopAuditSink, SqlAlchemyAuditSink
from .utils.imports import resolve_callable

logger = logging.getLogger("cronaudit.bootstrap")


def build_sink(storage: StorageConfig) -> AuditSink:
    """按存储配置创建审计存储"""
    if storage.backend == "noop":
        logger.info("使用空审计存储，审计记录将被丢弃")
        return NoopAuditSink()

    db_manager = DatabaseManager.get_instance(storage.db_path)
    logger.info(
        "使用 SQLite 审计存储 db_path=%s table=%s",
        storage.db_path,
        storage.table_name,
    )
    return SqlAlchemyAuditSink(
        db_manager,
        table_name=storage.table_name,
        raise_errors=storage.raise_errors,
    )


def build_wrapper(job: JobConfig, sink: AuditSink) -> ExecutionWrapper:
    """按任务配置创建执行包装器，任务与批量回调通过导入路径解析"""
    task = resolve_callable(job.task)
    batch_size_fn = resolve_callable(job.batch_size_fn) if job.batch_size_fn else None
    return ExecutionWrapper(
        name=job.name,
        task=task,
        sink=sink,
        batch_size_fn=batch_size_fn,
        retry_policy=job.retry_policy,
    )


def build_scheduler(
    settings: Settings, sink: Optional[AuditSink] = None
) -> CronScheduler:
    """创建调度器并注册配置中的全部任务

    Raises:
        ValueError: 任务名称重复或 crontab 表达式无效
        ImportError / AttributeError: 任务导入路径无法解析
    """
    sink = sink or build_sink(settings.storage)
    scheduler = CronScheduler(timezone=settings.scheduler_timezone)

    seen: List[str] = []
    for job in settings.jobs:
        if job.name in seen:
            raise ValueError(f"Duplicate job name: {job.name}")
        seen.append(job.name)
        scheduler.add_job(build_wrapper(job, sink), job.schedule)

    logger.info("调度任务组装完成 jobs=%d", len(seen))
    return scheduler
