"""集成测试配置 -- SQLite 后端的完整 app"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from salesdesk.core.store import create_store_group


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path, monkeypatch, clock):
    """SQLite 存储 + UTC 时区的 app，手动初始化绕过 lifespan"""
    db_path = str(tmp_path / "sqlite" / "integration.db")
    monkeypatch.setenv("SALESDESK_DB_PATH", db_path)
    monkeypatch.setenv("SALESDESK_TIMEZONE", "UTC")

    from salesdesk.gateway.main import create_app, install_services

    app = create_app()
    store_group = await create_store_group(db_path)
    install_services(app, store_group, clock=clock)
    app.state.db_path = db_path

    yield app

    await store_group.close()


@pytest_asyncio.fixture
async def integration_client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac
