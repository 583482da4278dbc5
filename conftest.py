"""全局 pytest 配置 -- 临时 SQLite 数据库 fixture + 固定时钟"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio


class FakeClock:
    """可手动推进的时钟，供 service 注入"""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """起始于 2026-03-10 08:00 UTC 的可控时钟"""
    return FakeClock(datetime(2026, 3, 10, 8, 0, tzinfo=UTC))


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from salesdesk.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    await init_db(conn)
    yield conn
    await conn.close()


@pytest.fixture
def make_task():
    """构建 Task 的工厂，默认 2026-03-10 09:00 UTC 的 pending 电话任务"""
    from salesdesk.core.models import Task, TaskKind

    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        created = datetime(2026, 3, 10, 7, 0, tzinfo=UTC)
        data = {
            "task_id": f"01JTASK{counter['n']:019d}",
            "assignee_id": "seller-1",
            "kind": TaskKind.CALL,
            "title": f"Chiamata cliente {counter['n']}",
            "scheduled_at": datetime(2026, 3, 10, 9, 0, tzinfo=UTC),
            "created_at": created,
            "updated_at": created,
        }
        data.update(overrides)
        return Task(**data)

    return _make
