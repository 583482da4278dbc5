"""SQLite 数据库初始化

PRAGMA 配置 + tasks / profiles 两张表 DDL + 索引创建。
文档以 pydantic JSON 存储，查询用列单独冗余。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# tasks 表 DDL
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id       TEXT PRIMARY KEY,
    assignee_id   TEXT NOT NULL,
    status        TEXT NOT NULL DEFAULT 'pending',
    scheduled_at  TEXT NOT NULL,
    updated_at    TEXT NOT NULL,
    document      TEXT NOT NULL DEFAULT '{}'
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_assignee_status ON tasks(assignee_id, status);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_assignee_scheduled ON tasks(assignee_id, scheduled_at);",
]

# profiles 表 DDL
_PROFILES_DDL = """
CREATE TABLE IF NOT EXISTS profiles (
    assignee_id  TEXT PRIMARY KEY,
    version      INTEGER NOT NULL DEFAULT 0,
    updated_at   TEXT,
    document     TEXT NOT NULL DEFAULT '{}'
);
"""


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 创建表
    await conn.execute(_TASKS_DDL)
    await conn.execute(_PROFILES_DDL)

    # 创建索引
    for idx_sql in _TASKS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
