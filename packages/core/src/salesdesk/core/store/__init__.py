"""Salesdesk Core Store -- 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组（SQLite），
以及测试/演示用的内存 Store 实例组。
"""

from pathlib import Path

import aiosqlite

from .memory_store import InMemoryProfileStore, InMemoryTaskStore
from .profile_store import SqliteProfileStore
from .protocols import ProfileStore, TaskStore
from .sqlite_init import init_db
from .task_store import SqliteTaskStore


class StoreGroup:
    """Store 实例组 -- SQLite 实现共享同一个数据库连接"""

    def __init__(
        self,
        task_store: TaskStore,
        profile_store: ProfileStore,
        conn: aiosqlite.Connection | None = None,
    ) -> None:
        self.conn = conn
        self.task_store = task_store
        self.profile_store = profile_store

    async def close(self) -> None:
        """关闭底层连接（内存实现无需关闭）"""
        if self.conn is not None:
            await self.conn.close()


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 SQLite Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(
        task_store=SqliteTaskStore(conn),
        profile_store=SqliteProfileStore(conn),
        conn=conn,
    )


def create_memory_store_group() -> StoreGroup:
    """创建内存 Store 实例组"""
    return StoreGroup(
        task_store=InMemoryTaskStore(),
        profile_store=InMemoryProfileStore(),
    )


__all__ = [
    "StoreGroup",
    "create_store_group",
    "create_memory_store_group",
    "TaskStore",
    "ProfileStore",
    "SqliteTaskStore",
    "SqliteProfileStore",
    "InMemoryTaskStore",
    "InMemoryProfileStore",
    "init_db",
]
