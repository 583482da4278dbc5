"""TaskStore SQLite 实现

每个任务以 pydantic JSON 文档存储；assignee_id / status / scheduled_at 冗余为列用于查询。
写入为单文档 upsert（last-write-wins），失败时回滚，不留部分写入。
"""

from datetime import UTC

import aiosqlite

from ..exceptions import StoreUnavailableError
from ..models.task import Task, TaskFilter


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        try:
            cursor = await self._conn.execute(
                "SELECT document FROM tasks WHERE task_id = ?",
                (task_id,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreUnavailableError("get_task", e) from e
        if row is None:
            return None
        return Task.model_validate_json(row[0])

    async def put_task(self, task: Task) -> None:
        """新建或覆盖任务文档"""
        try:
            await self._conn.execute(
                """
                INSERT INTO tasks (task_id, assignee_id, status, scheduled_at,
                                   updated_at, document)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(task_id) DO UPDATE SET
                    assignee_id = excluded.assignee_id,
                    status = excluded.status,
                    scheduled_at = excluded.scheduled_at,
                    updated_at = excluded.updated_at,
                    document = excluded.document
                """,
                (
                    task.task_id,
                    task.assignee_id,
                    task.status.value,
                    task.scheduled_at.astimezone(UTC).isoformat(),
                    task.updated_at.isoformat(),
                    task.model_dump_json(),
                ),
            )
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self._conn.rollback()
            raise StoreUnavailableError("put_task", e) from e

    async def list_tasks(
        self,
        assignee_id: str,
        task_filter: TaskFilter | None = None,
    ) -> list[Task]:
        """查询 assignee 的任务，状态在 SQL 中过滤，时间窗口在模型层过滤"""
        task_filter = task_filter or TaskFilter()
        sql = "SELECT document FROM tasks WHERE assignee_id = ?"
        params: list[str] = [assignee_id]
        if task_filter.statuses is not None:
            statuses = sorted(s.value for s in task_filter.statuses)
            if not statuses:
                return []
            sql += f" AND status IN ({', '.join('?' for _ in statuses)})"
            params.extend(statuses)
        sql += " ORDER BY scheduled_at ASC"

        try:
            cursor = await self._conn.execute(sql, params)
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StoreUnavailableError("list_tasks", e) from e

        tasks = [Task.model_validate_json(row[0]) for row in rows]
        return [t for t in tasks if task_filter.matches(t)]
