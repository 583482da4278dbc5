"""apps/gateway 测试配置 -- 内存存储的 Service 组合 + httpx AsyncClient"""

from collections.abc import AsyncGenerator
from datetime import UTC

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from salesdesk.core.store import StoreGroup, create_memory_store_group
from salesdesk.gateway.services.context_service import ContextService
from salesdesk.gateway.services.task_service import TaskService


@pytest.fixture
def store_group() -> StoreGroup:
    return create_memory_store_group()


@pytest.fixture
def context_service(store_group: StoreGroup, clock) -> ContextService:
    return ContextService(store_group.profile_store, history_limit=100, clock=clock)


@pytest.fixture
def task_service(store_group: StoreGroup, context_service: ContextService, clock) -> TaskService:
    return TaskService(store_group, context_service=context_service, clock=clock, tz=UTC)


@pytest_asyncio.fixture
async def app(monkeypatch, clock):
    """创建测试用 FastAPI app（内存存储，UTC 时区，手动初始化绕过 lifespan）"""
    monkeypatch.setenv("SALESDESK_STORE_BACKEND", "memory")
    monkeypatch.setenv("SALESDESK_TIMEZONE", "UTC")

    from salesdesk.gateway.main import create_app, install_services

    application = create_app()
    install_services(application, create_memory_store_group(), clock=clock)
    yield application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
