"""执行包装器

对一次调度触发的完整处理流程：

1. 记录开始时间
2. 执行任务并分类结果（成功时调用批量计数回调；失败时发出 failure 通知并按策略重试）
3. 无论如何记录结束时间
4. 构建审计记录并写入审计存储（恰好一次）
5. 发出 complete 通知

任务异常在此被捕获并分类，不会向调用方传播；审计存储写入失败则向调用方传播，
此时不再发出 complete 通知。
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from ..models.audit import AuditRecord, ExecutionStatus
from ..sinks.base import AuditSink
from .events import CompleteEvent, FailureEvent, LifecycleEvents, SuccessEvent
from .retry import RetryController, RetryOutcome, RetryPolicy, TaskCallable

logger = logging.getLogger("cronaudit.wrapper")

BatchSizeCallable = Callable[[], Awaitable[int]]
Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def describe_error(error: BaseException) -> str:
    """错误描述：优先使用异常消息，消息为空时退回异常类名"""
    return str(error) or error.__class__.__name__


class ExecutionWrapper:
    """包装单个调度任务的执行、重试与审计

    Attributes:
        name: 调度任务名称，写入审计记录并作为调度 job id
        task: 无参异步任务
        sink: 审计存储
        batch_size_fn: 可选的无参异步批量计数回调
        retry_policy: 重试策略，默认不重试
        events: 生命周期通知分发器
        last_retry_outcome: 最近一次触发中的重试结果，未重试时为 None
        running: 当前是否有触发正在执行（含重试与审计写入）
    """

    def __init__(
        self,
        name: str,
        task: TaskCallable,
        sink: AuditSink,
        batch_size_fn: Optional[BatchSizeCallable] = None,
        retry_policy: Optional[RetryPolicy] = None,
        events: Optional[LifecycleEvents] = None,
        retry_controller: Optional[RetryController] = None,
        clock: Optional[Clock] = None,
    ):
        self.name = name
        self.task = task
        self.sink = sink
        self.batch_size_fn = batch_size_fn
        self.retry_policy = retry_policy or RetryPolicy()
        self.events = events or LifecycleEvents()
        self.retry_controller = retry_controller or RetryController(name)
        self._clock = clock or _utcnow
        self.last_retry_outcome: Optional[RetryOutcome] = None
        self._active = 0

    @property
    def running(self) -> bool:
        return self._active > 0

    async def execute(self) -> None:
        self._active += 1
        try:
            await self._execute_once()
        finally:
            self._active -= 1

    async def _execute_once(self) -> None:
        start_time = self._clock()
        status = ExecutionStatus.Success
        remarks: Optional[str] = None
        batch_size = 0
        self.last_retry_outcome = None

        logger.debug("[%s] 开始执行", self.name)

        try:
            try:
                await self.task()
                # 批量计数回调失败按任务失败处理
                if self.batch_size_fn is not None:
                    batch_size = int(await self.batch_size_fn())
            except Exception as e:
                status = ExecutionStatus.Failure
                remarks = describe_error(e)
                logger.error("[%s] 任务执行失败 error=%s", self.name, remarks)
                self.events.emit(FailureEvent(name=self.name, error=remarks))

                if self.retry_policy.enabled:
                    self.last_retry_outcome = await self.retry_controller.retry(
                        self.task, self.retry_policy
                    )
            else:
                self.events.emit(SuccessEvent(name=self.name, batch_size=batch_size))
        except BaseException as e:
            # 取消/中断不吞掉，但仍写入一条失败记录
            status = ExecutionStatus.Failure
            remarks = remarks or describe_error(e)
            raise
        finally:
            end_time = self._clock()
            record = AuditRecord(
                name=self.name,
                start_time=start_time,
                end_time=end_time,
                status=status,
                remarks=remarks,
                batch_size=batch_size if status is ExecutionStatus.Success else 0,
            )
            await self.sink.log(record)

            logger.info(
                "[%s] 执行完成 status=%s batch_size=%d duration=%.3fs",
                self.name,
                status.value,
                record.batch_size,
                record.duration_seconds,
            )
            self.events.emit(
                CompleteEvent(name=self.name, status=status, end_time=end_time)
            )
