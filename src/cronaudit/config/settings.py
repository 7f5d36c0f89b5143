from __future__ import annotations

from pydantic import BaseModel, Field
from pathlib import Path
import yaml
from typing import List, Literal, Optional
import logging
import os

from ..execution.retry import RetryPolicy

logger = logging.getLogger("cronaudit.config")

CONFIG_FILE_NAME = "cronaudit.yaml"


class JobConfig(BaseModel):
    name: str = Field(min_length=1)
    schedule: str
    task: str = Field(description="任务的导入路径，格式 module:attr")
    batch_size_fn: Optional[str] = Field(default=None)
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)


class StorageConfig(BaseModel):
    backend: Literal["sqlite", "noop"] = Field(default="sqlite")
    db_path: str = Field(default="./data/cronaudit.db")
    table_name: str = Field(default="cron_audit_logs")
    raise_errors: bool = Field(default=False)

    def __init__(self, **data):
        super().__init__(**data)
        # 支持环境变量覆盖数据库路径
        if "CRONAUDIT_DB_PATH" in os.environ:
            self.db_path = os.environ["CRONAUDIT_DB_PATH"]


class Settings(BaseModel):
    scheduler_timezone: str = Field(default="UTC")
    jobs: List[JobConfig] = Field(default_factory=list)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    @staticmethod
    def from_yaml(path: Optional[Path | str] = None) -> "Settings":
        """从 YAML 文件加载配置"""
        if path is None:
            path = _discover_yaml_path()

        path = Path(path)
        if not path.exists():
            logger.warning(f"配置文件不存在: {path}")
            return Settings()

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            # 解析任务配置，无效项跳过
            jobs = []
            for item_data in data.get("jobs") or []:
                if isinstance(item_data, dict):
                    try:
                        jobs.append(JobConfig(**item_data))
                    except Exception as e:
                        logger.warning(f"跳过无效的任务配置项: {item_data}, 错误: {e}")

            storage_config = StorageConfig(**(data.get("storage") or {}))

            return Settings(
                scheduler_timezone=data.get("scheduler_timezone", "UTC"),
                jobs=jobs,
                storage=storage_config,
            )

        except Exception as e:
            logger.error(f"加载配置文件失败: {e}")
            return Settings()


def _discover_yaml_path() -> Path:
    """查找配置文件：优先 CRONAUDIT_CONFIG，其次当前目录，再向上递归查找"""
    env_path = os.environ.get("CRONAUDIT_CONFIG")
    if env_path:
        return Path(env_path)

    cwd_candidate = Path.cwd() / CONFIG_FILE_NAME
    if cwd_candidate.exists():
        return cwd_candidate

    start = Path(__file__).resolve()
    for parent in start.parents:
        candidate = parent / CONFIG_FILE_NAME
        if candidate.exists():
            return candidate
    return cwd_candidate


_settings: Settings | None = None


def get_settings() -> Settings:
    """获取全局配置实例"""
    global _settings
    if _settings is None:
        _settings = Settings.from_yaml()
    return _settings


def reset_settings() -> None:
    """清除缓存的配置（主要用于测试）"""
    global _settings
    _settings = None
