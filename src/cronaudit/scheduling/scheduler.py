from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from ..execution.wrapper import ExecutionWrapper

logger = logging.getLogger("cronaudit.scheduler")


class JobAlreadyRunningError(RuntimeError):
    """手动触发时该任务已有触发正在执行"""


class CronScheduler:
    """Cron 调度绑定，负责把执行包装器注册为 cron 触发器的回调。

    - 封装 APScheduler（异步）
    - 使用标准 5 段 crontab 表达式
    - 同一任务的上一次触发（含重试）尚未结束时，新的触发会被跳过而不是并发执行

    Attributes:
        scheduler: APScheduler 异步调度器实例
    """

    def __init__(self, timezone: str = "UTC", misfire_grace_time: int = 300):
        self.timezone = timezone
        self.scheduler = AsyncIOScheduler(
            timezone=timezone,
            job_defaults={
                "coalesce": True,  # 多个待执行实例合并
                "max_instances": 1,  # 同一任务最多并发1
                "misfire_grace_time": misfire_grace_time,
            },
        )
        self._wrappers: Dict[str, ExecutionWrapper] = {}
        self._schedules: Dict[str, str] = {}

    @property
    def running(self) -> bool:
        return bool(self.scheduler.running)

    def add_job(self, wrapper: ExecutionWrapper, schedule: str) -> str:
        """注册执行包装器。

        Args:
            wrapper: 执行包装器，其 name 作为 job id
            schedule: crontab 表达式，例如 "*/5 * * * *"

        Returns:
            str: job id

        Raises:
            ValueError: crontab 表达式无效
        """
        trigger = CronTrigger.from_crontab(schedule, timezone=self.timezone)
        job_id = wrapper.name
        self.scheduler.add_job(
            self._run_scheduled,
            trigger=trigger,
            args=[job_id],
            id=job_id,
            name=wrapper.name,
            replace_existing=True,
            # max_instances/coalesce 由 job_defaults 统一控制
        )
        self._wrappers[job_id] = wrapper
        self._schedules[job_id] = schedule
        logger.info('[%s] 已按表达式 "%s" 完成调度注册', wrapper.name, schedule)
        return job_id

    def start(self) -> None:
        """启动调度器（需要在运行中的事件循环内调用）"""
        self.scheduler.start()
        logger.info("Cron 调度器已启动 jobs=%d", len(self._wrappers))

    def shutdown(self) -> None:
        """关闭调度器，不等待正在执行的任务"""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Cron 调度器已关闭")

    def get_wrapper(self, name: str) -> Optional[ExecutionWrapper]:
        return self._wrappers.get(name)

    def get_jobs_snapshot(self) -> Dict[str, Dict[str, Any]]:
        """获取已注册任务的快照（job id -> 名称、表达式、下次执行时间）"""
        snapshot: Dict[str, Dict[str, Any]] = {}
        for job in self.scheduler.get_jobs():
            snapshot[job.id] = {
                "name": job.name,
                "schedule": self._schedules.get(job.id),
                # 调度器启动前 job 尚未计算下次执行时间
                "next_run_at": getattr(job, "next_run_time", None),
            }
        return snapshot

    async def run_now(self, name: str) -> None:
        """立即执行一次指定任务（不影响原有调度）

        与 cron 触发共享 max_instances=1 的约束：任务正在执行时拒绝手动触发。

        Raises:
            KeyError: 任务未注册
            JobAlreadyRunningError: 任务正在执行
        """
        wrapper = self._wrappers.get(name)
        if wrapper is None:
            raise KeyError(name)
        if wrapper.running:
            logger.warning("[manual] 任务正在执行，跳过手动触发 name=%s", name)
            raise JobAlreadyRunningError(name)
        logger.info("[manual] 手动触发任务 name=%s", name)
        await wrapper.execute()

    async def _run_scheduled(self, name: str) -> None:
        """cron 触发回调：手动触发仍在执行时跳过本次触发"""
        wrapper = self._wrappers[name]
        if wrapper.running:
            logger.warning("[%s] 上一次触发尚未结束，跳过本次 cron 触发", name)
            return
        await wrapper.execute()
