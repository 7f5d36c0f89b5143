"""执行生命周期通知

三种通知事件及其载荷：
- success{name, batch_size}
- failure{name, error}
- complete{name, status, end_time}

观察者通过 LifecycleEvents.on() 订阅，回调为同步函数。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Union

from ..models.audit import ExecutionStatus

logger = logging.getLogger("cronaudit.events")


@dataclass(frozen=True)
class SuccessEvent:
    name: str
    batch_size: int

    event_name = "success"


@dataclass(frozen=True)
class FailureEvent:
    name: str
    error: str

    event_name = "failure"


@dataclass(frozen=True)
class CompleteEvent:
    name: str
    status: ExecutionStatus
    end_time: datetime

    event_name = "complete"


LifecycleEvent = Union[SuccessEvent, FailureEvent, CompleteEvent]
Listener = Callable[[LifecycleEvent], None]

EVENT_NAMES = (
    SuccessEvent.event_name,
    FailureEvent.event_name,
    CompleteEvent.event_name,
)


class LifecycleEvents:
    """生命周期通知分发器

    按事件名保存订阅者列表，emit() 时按订阅顺序依次调用。
    单个观察者抛出的异常只记录日志，不影响本次执行的结果分类和后续观察者。
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {name: [] for name in EVENT_NAMES}

    def on(self, event_name: str, listener: Listener) -> None:
        """订阅事件

        Raises:
            ValueError: 事件名不是 success/failure/complete 之一
        """
        if event_name not in self._listeners:
            raise ValueError(f"Unknown lifecycle event: {event_name}")
        self._listeners[event_name].append(listener)

    def off(self, event_name: str, listener: Listener) -> None:
        """取消订阅，未订阅过时静默忽略"""
        listeners = self._listeners.get(event_name, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event_name: str) -> int:
        return len(self._listeners.get(event_name, []))

    def emit(self, event: LifecycleEvent) -> None:
        for listener in list(self._listeners[event.event_name]):
            try:
                listener(event)
            except Exception as e:
                logger.error(
                    "生命周期观察者执行失败 event=%s name=%s error=%s",
                    event.event_name,
                    event.name,
                    e,
                )
