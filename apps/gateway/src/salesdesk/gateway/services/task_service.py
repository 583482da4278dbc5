"""TaskService -- 任务集合业务逻辑

面向单个 assignee 的任务集合操作：
1. 创建 / 查询任务
2. 应用状态流转（start / complete / skip / dismiss / snooze / restore）
3. 按天分桶、归档视图
4. complete 成功落盘后（如配置了 ContextService）恰好一次折叠进画像

每次流转只读写目标任务本身，不触碰同一 assignee 的其他任务。
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, date, datetime, timedelta, tzinfo

import structlog
from salesdesk.core import lifecycle
from salesdesk.core.config import get_timezone
from salesdesk.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    ValidationFailedError,
)
from salesdesk.core.lifecycle import CompletionPayload
from salesdesk.core.models import (
    ACTIVE_STATES,
    ARCHIVED_STATES,
    TERMINAL_STATES,
    AttachmentSummary,
    Task,
    TaskAction,
    TaskFilter,
    TaskGuidance,
    TaskKind,
    TaskPriority,
    TaskStatus,
)
from salesdesk.core.store import StoreGroup
from salesdesk.core.views import ArchiveView, DayPartition, archived_view, partition_by_day
from ulid import ULID

from .context_service import ContextService

log = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TaskService:
    """任务业务服务"""

    def __init__(
        self,
        store_group: StoreGroup,
        context_service: ContextService | None = None,
        clock: Callable[[], datetime] | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self._stores = store_group
        self._context = context_service
        self._clock = clock or _utcnow
        self._tz = tz or get_timezone()
        self._task_locks: dict[str, asyncio.Lock] = {}
        self._task_locks_guard = asyncio.Lock()

    async def create_task(
        self,
        assignee_id: str,
        title: str,
        scheduled_at: datetime,
        kind: TaskKind = TaskKind.OTHER,
        description: str = "",
        priority: TaskPriority = TaskPriority.MEDIUM,
        guidance: TaskGuidance | None = None,
        client_name: str = "",
        deal_title: str = "",
    ) -> Task:
        """创建 pending 任务

        Raises:
            ValidationFailedError: 标题或 assignee 为空，或 scheduled_at 缺少时区
        """
        if not assignee_id:
            raise ValidationFailedError("assignee_id")
        if not title or not title.strip():
            raise ValidationFailedError("title", "Task title is required")
        if scheduled_at.tzinfo is None:
            raise ValidationFailedError(
                "scheduled_at", "Scheduled time must include a timezone offset"
            )

        now = self._clock()
        task = Task(
            task_id=str(ULID()),
            assignee_id=assignee_id,
            kind=kind,
            title=title.strip(),
            description=description.strip(),
            priority=priority,
            status=TaskStatus.PENDING,
            scheduled_at=scheduled_at,
            guidance=guidance,
            client_name=client_name,
            deal_title=deal_title,
            created_at=now,
            updated_at=now,
        )
        await self._stores.task_store.put_task(task)

        log.info(
            "task_created",
            task_id=task.task_id,
            assignee_id=assignee_id,
            kind=kind.value,
            scheduled_at=scheduled_at.isoformat(),
        )
        return task

    async def get_task(self, task_id: str) -> Task:
        """查询任务详情

        Raises:
            NotFoundError: 任务不存在
        """
        task = await self._stores.task_store.get_task(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    async def list_tasks(
        self, assignee_id: str, task_filter: TaskFilter | None = None
    ) -> list[Task]:
        """查询任务列表"""
        return await self._stores.task_store.list_tasks(assignee_id, task_filter)

    async def start(self, task_id: str) -> Task:
        return await self._apply(task_id, TaskAction.START)

    async def complete(
        self,
        task_id: str,
        payload: CompletionPayload,
        attachment_summaries: list[AttachmentSummary] | None = None,
    ) -> Task:
        """完成任务；落盘成功后折叠进画像

        校验失败或落盘失败时不会触发画像更新；
        画像更新失败时任务回写为完成前的状态，调用方可重试 complete。
        """

        async def ingest(task: Task) -> None:
            if self._context is not None:
                await self._context.ingest_completion(
                    task.assignee_id, task, attachment_summaries
                )

        return await self._apply(
            task_id, TaskAction.COMPLETE, after_write=ingest, payload=payload
        )

    async def skip(self, task_id: str) -> Task:
        return await self._apply(task_id, TaskAction.SKIP)

    async def dismiss(self, task_id: str) -> Task:
        return await self._apply(task_id, TaskAction.DISMISS)

    async def snooze(self, task_id: str, until: datetime | None, reason: str) -> Task:
        return await self._apply(task_id, TaskAction.SNOOZE, until=until, reason=reason)

    async def restore(self, task_id: str) -> Task:
        return await self._apply(task_id, TaskAction.RESTORE)

    async def partition_by_day(
        self,
        assignee_id: str,
        today: date,
        tomorrow: date | None = None,
    ) -> DayPartition:
        """今天 / 明天两个任务桶（不含归档任务）"""
        tasks = await self.list_tasks(
            assignee_id,
            TaskFilter(statuses=set(ACTIVE_STATES | TERMINAL_STATES)),
        )
        return partition_by_day(
            tasks,
            today,
            tomorrow or today + timedelta(days=1),
            self._tz,
        )

    async def archived_view(self, assignee_id: str) -> ArchiveView:
        """snoozed / dismissed 两个归档列表"""
        tasks = await self.list_tasks(
            assignee_id, TaskFilter(statuses=set(ARCHIVED_STATES))
        )
        return archived_view(tasks)

    async def _apply(
        self,
        task_id: str,
        action: TaskAction,
        after_write: Callable[[Task], Awaitable[None]] | None = None,
        **kwargs,
    ) -> Task:
        """读取任务 -> 应用流转 -> 写回（同一任务串行化）

        after_write 在锁内、写回之后执行；失败时回写原任务并重新抛出。
        """
        lock = await self._get_task_lock(task_id)
        async with lock:
            task = await self.get_task(task_id)
            try:
                updated = lifecycle.apply_action(task, action, self._clock(), **kwargs)
            except (InvalidTransitionError, ValidationFailedError) as e:
                log.info(
                    "task_transition_rejected",
                    task_id=task_id,
                    action=action.value,
                    status=task.status.value,
                    error_type=type(e).__name__,
                    field=getattr(e, "field", None),
                )
                raise
            await self._stores.task_store.put_task(updated)
            if after_write is not None:
                try:
                    await after_write(updated)
                except Exception as e:
                    await self._stores.task_store.put_task(task)
                    log.warning(
                        "task_transition_reverted",
                        task_id=task_id,
                        action=action.value,
                        status=task.status.value,
                        error_type=type(e).__name__,
                    )
                    raise

        log.info(
            "task_transition_applied",
            task_id=task_id,
            assignee_id=updated.assignee_id,
            action=action.value,
            from_status=task.status.value,
            to_status=updated.status.value,
        )
        if updated.status in TERMINAL_STATES:
            await self._cleanup_task_lock(task_id)
        return updated

    async def _get_task_lock(self, task_id: str) -> asyncio.Lock:
        """获取 task 级别锁，序列化同一任务的读-改-写。"""
        async with self._task_locks_guard:
            lock = self._task_locks.get(task_id)
            if lock is None:
                lock = asyncio.Lock()
                self._task_locks[task_id] = lock
            return lock

    async def _cleanup_task_lock(self, task_id: str) -> None:
        """任务终态后清理 lock，避免字典无限增长。"""
        async with self._task_locks_guard:
            lock = self._task_locks.get(task_id)
            if lock is not None and not lock.locked():
                self._task_locks.pop(task_id, None)
