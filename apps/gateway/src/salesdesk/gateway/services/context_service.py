"""ContextService -- AI 上下文累积服务

将完成的任务折叠进 assignee 画像，维护有界 history 与派生统计，
并输出供 prompt 构建使用的格式化文本。

并发：同一 assignee 的读-改-写在进程内通过 asyncio.Lock 串行化，
避免并发完成时统计基于过期 history 重算而丢失更新。
"""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime

import structlog
from salesdesk.core.config import get_context_history_limit
from salesdesk.core.context import (
    build_history_entry,
    contains_task,
    empty_profile,
    fold_completion,
    merge_custom_context,
)
from salesdesk.core.exceptions import NotFoundError, ValidationFailedError
from salesdesk.core.models import (
    AttachmentSummary,
    CustomContextUpdate,
    Profile,
    Task,
    TaskStatus,
)
from salesdesk.core.prompt import format_profile_for_prompt
from salesdesk.core.store import ProfileStore

log = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ContextService:
    """画像读写业务服务"""

    def __init__(
        self,
        profile_store: ProfileStore,
        history_limit: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = profile_store
        self._history_limit = history_limit or get_context_history_limit()
        self._clock = clock or _utcnow
        self._assignee_locks: dict[str, asyncio.Lock] = {}
        self._assignee_locks_guard = asyncio.Lock()

    async def _get_assignee_lock(self, assignee_id: str) -> asyncio.Lock:
        """获取 assignee 级别锁，序列化同一画像的写入。"""
        async with self._assignee_locks_guard:
            lock = self._assignee_locks.get(assignee_id)
            if lock is None:
                lock = asyncio.Lock()
                self._assignee_locks[assignee_id] = lock
            return lock

    async def get_profile(self, assignee_id: str) -> Profile:
        """查询画像

        Raises:
            NotFoundError: 画像不存在
        """
        profile = await self._store.get_profile(assignee_id)
        if profile is None:
            raise NotFoundError("Profile", assignee_id)
        return profile

    async def get_or_empty_profile(self, assignee_id: str) -> Profile:
        """查询画像，不存在时返回 version 0 的空画像（不落盘）"""
        profile = await self._store.get_profile(assignee_id)
        return profile or empty_profile(assignee_id)

    async def list_profiles(self) -> list[Profile]:
        return await self._store.list_profiles()

    async def ingest_completion(
        self,
        assignee_id: str,
        task: Task,
        attachment_summaries: list[AttachmentSummary] | None = None,
    ) -> Profile:
        """将一个已完成任务折叠进画像

        同一 task_id 已在 history 中时不重复计入，直接返回现有画像。

        Raises:
            ValidationFailedError: 任务不属于该 assignee 或尚未完成
            StoreUnavailableError: 存储读写失败（画像保持原状）
        """
        if task.assignee_id != assignee_id:
            raise ValidationFailedError(
                "assignee_id", f"Task {task.task_id} is not assigned to {assignee_id}"
            )
        if task.status != TaskStatus.COMPLETED:
            raise ValidationFailedError(
                "status", f"Task {task.task_id} is not completed (status={task.status})"
            )

        lock = await self._get_assignee_lock(assignee_id)
        async with lock:
            existing = await self._store.get_profile(assignee_id)
            profile = existing or empty_profile(assignee_id)

            if contains_task(profile, task.task_id):
                log.info(
                    "context_ingest_duplicate_skipped",
                    assignee_id=assignee_id,
                    task_id=task.task_id,
                    version=profile.version,
                )
                return profile

            now = self._clock()
            entry = build_history_entry(task, attachment_summaries, now)
            updated = fold_completion(profile, entry, self._history_limit, now)
            await self._store.put_profile(updated)

        log.info(
            "context_ingested",
            assignee_id=assignee_id,
            task_id=task.task_id,
            version=updated.version,
            history_size=len(updated.history),
            success_rate=updated.stats.success_rate,
        )
        return updated

    async def update_custom_context(
        self,
        assignee_id: str,
        seller_name: str | None,
        update: CustomContextUpdate,
    ) -> Profile:
        """按字段浅合并管理员自定义上下文，不影响 history / stats"""
        lock = await self._get_assignee_lock(assignee_id)
        async with lock:
            profile = await self.get_or_empty_profile(assignee_id)
            updated = merge_custom_context(profile, seller_name, update, self._clock())
            await self._store.put_profile(updated)

        log.info(
            "custom_context_updated",
            assignee_id=assignee_id,
            version=updated.version,
            fields=sorted(update.model_dump(exclude_none=True)),
        )
        return updated

    async def format_for_prompt(self, assignee_id: str) -> str:
        """返回画像的 prompt 文本

        Raises:
            NotFoundError: 画像不存在
        """
        profile = await self.get_profile(assignee_id)
        return format_profile_for_prompt(profile)
