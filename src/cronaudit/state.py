"""调度器运行时引用

app.lifespan 在启动时按配置构建 CronScheduler 并通过 set_scheduler 登记，
关闭时置回 None；api.v1.routes 中的任务列表与手动触发接口通过
get_scheduler 读取同一个实例。未登记时（例如只挂载审计日志查询）返回 None，
路由据此返回空任务列表或 503。
"""

from __future__ import annotations

from typing import Optional

from .scheduling import CronScheduler

_scheduler: Optional[CronScheduler] = None


def get_scheduler() -> Optional[CronScheduler]:
    return _scheduler


def set_scheduler(instance: Optional[CronScheduler]) -> None:
    """登记（或清除）当前运行的调度器"""

    global _scheduler
    _scheduler = instance


__all__ = ["get_scheduler", "set_scheduler"]
