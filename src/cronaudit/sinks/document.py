"""文档数据库审计存储

接收任意提供 insert_one(document) 的集合对象（pymongo 的同步集合或 motor 的异步集合），
将审计记录以结构化文档形式写入。同步集合的阻塞写入放到工作线程中执行。
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Optional

from ..models.audit import AuditRecord

logger = logging.getLogger("cronaudit.sinks.document")


class DocumentAuditSink:
    """文档存储审计适配器

    Args:
        collection: 目标集合对象，需提供 insert_one 方法
        raise_errors: 写入失败时是否抛出异常；默认仅记录错误日志
        is_async: insert_one 是否返回可等待对象；为 None 时按是否为协程函数自动判断
    """

    def __init__(
        self,
        collection: Any,
        raise_errors: bool = False,
        is_async: Optional[bool] = None,
    ):
        insert_one = getattr(collection, "insert_one", None)
        if not callable(insert_one):
            raise TypeError("collection must provide an insert_one() method")
        self.collection = collection
        self.raise_errors = raise_errors
        self.is_async = (
            inspect.iscoroutinefunction(insert_one) if is_async is None else is_async
        )

    async def log(self, record: AuditRecord) -> None:
        document = record.to_dict()
        try:
            if self.is_async:
                await self.collection.insert_one(document)
            else:
                await asyncio.to_thread(self.collection.insert_one, document)
            logger.info("[DocumentAuditSink] 审计记录保存成功 name=%s", record.name)
        except Exception as e:
            logger.error(
                "[DocumentAuditSink] 审计记录保存失败 name=%s error=%s",
                record.name,
                e,
            )
            if self.raise_errors:
                raise
