"""失败重试控制

RetryController 在初次执行失败后按 RetryPolicy 有界地重新调用任务，
两次尝试之间固定等待 delay 秒。重试结果只用于日志与返回值，
不会回写到审计记录。

状态流转：Idle -> Attempting -> Succeeded | Exhausted（终态）
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("cronaudit.retry")

TaskCallable = Callable[[], Awaitable[None]]
SleepCallable = Callable[[float], Awaitable[None]]


class RetryPolicy(BaseModel):
    """重试策略（每个执行包装器实例内不可变）"""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False)
    max_attempts: int = Field(default=3, ge=0)
    delay: float = Field(default=0.0, ge=0, description="两次尝试之间的等待秒数")


class RetryOutcome(str, Enum):
    Succeeded = "succeeded"
    Exhausted = "exhausted"


class RetryController:
    """有界重试循环

    Args:
        name: 调度任务名称，仅用于日志
        sleep: 等待函数，默认 asyncio.sleep，测试中可替换
    """

    def __init__(self, name: str, sleep: Optional[SleepCallable] = None):
        self.name = name
        self._sleep = sleep or asyncio.sleep

    async def retry(self, task: TaskCallable, policy: RetryPolicy) -> RetryOutcome:
        logger.info("[%s] 开始重试 max_attempts=%d", self.name, policy.max_attempts)
        attempts = 0

        while attempts < policy.max_attempts:
            attempts += 1
            try:
                await task()
            except Exception as e:
                logger.warning(
                    "[%s] 第 %d 次重试失败 error=%s", self.name, attempts, e
                )
                if attempts == policy.max_attempts:
                    break
                if policy.delay > 0:
                    await self._sleep(policy.delay)
                continue

            logger.info("[%s] 第 %d 次重试成功", self.name, attempts)
            return RetryOutcome.Succeeded

        logger.error("[%s] 已达到最大重试次数 attempts=%d", self.name, attempts)
        return RetryOutcome.Exhausted
