"""审计记录数据模型

每次调度触发（firing）生成一条 AuditRecord，无论期间发生多少次重试。
记录在所有重试结束后一次性写入审计存储，随后即被丢弃。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class ExecutionStatus(str, Enum):
    """执行状态枚举，取值即为持久化到存储中的字符串。

    - Success: 初次执行成功
    - Failure: 初次执行失败（即使后续重试成功也保持 Failure）
    """

    Success = "Success"
    Failure = "Failure"


@dataclass(frozen=True)
class AuditRecord:
    """单次触发的审计记录

    Attributes:
        name: 调度任务名称（配置时确定）
        start_time: 开始时间（含重试在内的整个执行区间）
        end_time: 结束时间
        status: 初次执行的结果分类
        remarks: 初次执行失败时的错误描述，成功时为 None
        batch_size: 初次执行成功时由批量计数回调给出，默认 0
    """

    name: str
    start_time: datetime
    end_time: datetime
    status: ExecutionStatus
    remarks: Optional[str] = None
    batch_size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """转换为文档存储使用的字典格式"""
        return {
            "cron_name": self.name,
            "start_date_time": self.start_time,
            "end_date_time": self.end_time,
            "execution_status": self.status.value,
            "remarks": self.remarks,
            "batch_size": self.batch_size,
        }

    def to_row(self) -> tuple:
        """转换为关系表的六列位置参数（顺序与表结构一致）"""
        return (
            self.name,
            self.start_time,
            self.end_time,
            self.status.value,
            self.remarks,
            self.batch_size,
        )

    @property
    def duration_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()
