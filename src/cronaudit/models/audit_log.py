"""审计日志表模型

本模块定义了 cron 审计日志的关系表结构，使用 SQLAlchemy ORM 实现，
并提供单例的数据库管理器负责连接与会话管理。
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import (
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    sessionmaker,
)

DEFAULT_TABLE_NAME = "cron_audit_logs"


# SQLAlchemy 基类（Typed Declarative）
class Base(DeclarativeBase):
    pass


class CronAuditLog(Base):
    """Cron 审计日志表

    每次调度触发写入一行，字段顺序与审计记录的六列一致。

    字段说明：
    - id: 自增主键
    - cron_name: 调度任务名称
    - start_date_time: 开始时间
    - end_date_time: 结束时间（包含重试耗时）
    - execution_status: 执行状态 Success/Failure
    - remarks: 失败原因，成功时为空
    - batch_size: 本次处理的批量大小
    """

    __tablename__ = DEFAULT_TABLE_NAME

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    cron_name: Mapped[str] = mapped_column(
        String, nullable=False, index=True, comment="调度任务名称"
    )
    start_date_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True, comment="开始时间"
    )
    end_date_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, comment="结束时间"
    )
    execution_status: Mapped[str] = mapped_column(
        String, nullable=False, index=True, comment="执行状态：Success/Failure"
    )
    remarks: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, comment="失败原因"
    )
    batch_size: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="批量大小"
    )

    def __repr__(self) -> str:
        return (
            f"<CronAuditLog("
            f"id={self.id}, "
            f"cron_name={self.cron_name}, "
            f"execution_status={self.execution_status})>"
        )

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "id": self.id,
            "cron_name": self.cron_name,
            "start_date_time": (
                self.start_date_time.isoformat()
                if self.start_date_time is not None
                else None
            ),
            "end_date_time": (
                self.end_date_time.isoformat()
                if self.end_date_time is not None
                else None
            ),
            "execution_status": self.execution_status,
            "remarks": self.remarks,
            "batch_size": self.batch_size,
        }


_extra_tables: Dict[str, Table] = {}
_extra_metadata = MetaData()
_tables_lock = threading.Lock()


def audit_table(table_name: str = DEFAULT_TABLE_NAME) -> Table:
    """获取指定名称的审计表

    默认表直接使用 ORM 映射的表；自定义表名复用相同的列结构。
    """
    if table_name == DEFAULT_TABLE_NAME:
        return CronAuditLog.__table__  # type: ignore[return-value]

    with _tables_lock:
        table = _extra_tables.get(table_name)
        if table is None:
            table = CronAuditLog.__table__.to_metadata(  # type: ignore[attr-defined]
                _extra_metadata, name=table_name
            )
            _extra_tables[table_name] = table
        return table


class DatabaseManager:
    """数据库管理器（单例模式）

    提供数据库连接和会话管理功能，支持自动创建表结构。
    采用线程安全的单例模式，确保全局只有一个数据库管理器实例。
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls, db_path: str = "cronaudit.db"):
        if cls._instance is None:
            with cls._lock:
                # 双重检查锁定
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self, db_path: str = "cronaudit.db"):
        """初始化数据库管理器

        Args:
            db_path: SQLite 数据库文件路径
        """
        # 确保只初始化一次
        if self._initialized:
            return

        self.db_path = db_path
        self.engine = create_engine(
            f"sqlite:///{db_path}",
            # 审计写入在工作线程中执行
            connect_args={"check_same_thread": False},
            echo=False,
        )
        with self.__class__._lock:
            Base.metadata.create_all(self.engine, checkfirst=True)
        self.Session = sessionmaker(bind=self.engine)

        self._initialized = True

    def get_session(self):
        """获取数据库会话"""
        return self.Session()

    def ensure_table(self, table_name: str) -> Table:
        """确保指定名称的审计表存在并返回该表"""
        table = audit_table(table_name)
        with self.__class__._lock:
            table.create(self.engine, checkfirst=True)
        return table

    def drop_tables(self):
        """删除所有表结构（慎用）"""
        Base.metadata.drop_all(self.engine)

    @classmethod
    def reset_instance(cls):
        """重置单例实例（主要用于测试）"""
        with cls._lock:
            if cls._instance is not None and cls._instance._initialized:
                cls._instance.engine.dispose()
            cls._instance = None

    @classmethod
    def get_instance(cls, db_path: str = "cronaudit.db") -> "DatabaseManager":
        """获取单例实例的便捷方法"""
        return cls(db_path)
