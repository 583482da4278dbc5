"""FastAPI 应用主文件

app 创建 + lifespan 管理：Store 初始化/关闭 + Service 组装 + 路由注册。
"""

from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from datetime import datetime

import structlog
from fastapi import FastAPI
from salesdesk.core.config import (
    get_context_history_limit,
    get_db_path,
    get_store_backend,
    get_timezone,
)
from salesdesk.core.store import StoreGroup, create_memory_store_group, create_store_group

from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import context, health, tasks
from .services.context_service import ContextService
from .services.task_service import TaskService

log = structlog.get_logger()


def install_services(
    app: FastAPI,
    store_group: StoreGroup,
    clock: Callable[[], datetime] | None = None,
) -> None:
    """在 app.state 上挂载 StoreGroup 与业务服务"""
    context_service = ContextService(
        store_group.profile_store,
        history_limit=get_context_history_limit(),
        clock=clock,
    )
    app.state.store_group = store_group
    app.state.context_service = context_service
    app.state.task_service = TaskService(
        store_group,
        context_service=context_service,
        clock=clock,
        tz=get_timezone(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化存储与服务，关闭时清理连接"""
    backend = get_store_backend()
    if backend == "memory":
        store_group = create_memory_store_group()
    else:
        store_group = await create_store_group(get_db_path())
    install_services(app, store_group)
    log.info("store_initialized", backend=backend)

    yield

    # 关闭：清理数据库连接
    if hasattr(app.state, "store_group") and app.state.store_group:
        await app.state.store_group.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="Salesdesk Gateway",
        version="0.1.0",
        description="销售任务生命周期与 AI 上下文累积 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    # 初始化日志
    setup_logging()

    # 注册路由
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(context.router, tags=["context"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
