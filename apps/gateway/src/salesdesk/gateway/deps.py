"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store 与 Service 实例

实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Request
from salesdesk.core.store import StoreGroup

from .services.context_service import ContextService
from .services.task_service import TaskService


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_task_service(request: Request) -> TaskService:
    """从 app.state 获取 TaskService 实例"""
    return request.app.state.task_service


def get_context_service(request: Request) -> ContextService:
    """从 app.state 获取 ContextService 实例"""
    return request.app.state.context_service
