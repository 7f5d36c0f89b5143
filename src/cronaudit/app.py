"""cronaudit 服务入口

- FastAPI 实例
- Cron 调度器集成（应用启动/关闭生命周期）
- 审计日志查询与手动触发 API
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator

from fastapi import FastAPI

from .api.v1 import router as api_v1_router
from .bootstrap import build_scheduler
from .config.settings import get_settings
from .state import get_scheduler, set_scheduler
from .utils.logging import setup_logging

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:  # noqa: D401 (fastapi 兼容)
    """应用生命周期：启动调度器 & 关闭清理。"""
    logger.info("Application starting ...")

    settings = get_settings()

    try:
        scheduler = build_scheduler(settings)
        scheduler.start()
    except Exception as exc:
        logger.exception("Failed to initialise scheduler: %s", exc)
        raise

    set_scheduler(scheduler)
    logger.info("Application started")

    try:
        yield
    finally:
        logger.info("Application shutting down ...")
        scheduler.shutdown()
        set_scheduler(None)


app = FastAPI(
    title="cronaudit",
    description="Cron 任务执行审计 API",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(api_v1_router)


@app.get("/", summary="健康检查 / Hello")
async def root():
    return {"message": "Hello cronaudit"}


@app.get("/status")
async def get_status() -> dict[str, Any]:
    """获取服务状态信息。"""
    scheduler = get_scheduler()
    return {
        "message": "cronaudit service is running",
        "scheduler_running": bool(scheduler and scheduler.running),
        "job_count": len(scheduler.get_jobs_snapshot()) if scheduler else 0,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# 可选：uvicorn 直接运行入口
if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run("cronaudit.app:app", host="0.0.0.0", port=8000)
