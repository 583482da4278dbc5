"""任务生命周期流转

所有流转都是纯函数：输入 Task 不会被修改，成功时返回新的 Task 副本，
失败时抛出 InvalidTransitionError / ValidationFailedError，原任务保持不变。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .exceptions import InvalidTransitionError, ValidationFailedError
from .models.enums import TaskAction, TaskOutcome, target_status, validate_transition
from .models.task import PostponeRecord, Task, TaskAttachment


class CompletionPayload(BaseModel):
    """complete 操作的调用方输入"""

    notes: str = Field(default="", description="完成备注（必填）")
    outcome: TaskOutcome | None = Field(default=None, description="完成结果（必填）")
    actual_duration: int | None = Field(default=None, description="实际耗时（分钟）")
    attachments: list[TaskAttachment] = Field(default_factory=list)


def _guard(task: Task, action: TaskAction) -> None:
    if not validate_transition(task.status, action):
        raise InvalidTransitionError(task.task_id, task.status.value, action.value)


def _transition(task: Task, action: TaskAction, now: datetime, **changes) -> Task:
    return task.model_copy(
        deep=True,
        update={"status": target_status(action), "updated_at": now, **changes},
    )


def start(task: Task, now: datetime) -> Task:
    """pending -> in_progress"""
    _guard(task, TaskAction.START)
    return _transition(
        task,
        TaskAction.START,
        now,
        started_at=task.started_at or now,
    )


def complete(task: Task, payload: CompletionPayload, now: datetime) -> Task:
    """in_progress -> completed

    校验顺序：流转合法性 -> notes -> outcome -> actual_duration -> 必需附件。
    """
    _guard(task, TaskAction.COMPLETE)

    notes = payload.notes.strip()
    if not notes:
        raise ValidationFailedError("notes", "Completion notes are required")
    if payload.outcome is None:
        raise ValidationFailedError("outcome", "Completion outcome is required")
    if payload.actual_duration is not None and payload.actual_duration < 0:
        raise ValidationFailedError("actual_duration", "Duration must be non-negative")

    expected = task.guidance.expected_output if task.guidance else None
    if expected is not None and expected.requires_attachment and not payload.attachments:
        raise ValidationFailedError(
            "attachments", "This task requires at least one attached document"
        )

    return _transition(
        task,
        TaskAction.COMPLETE,
        now,
        completed_at=now,
        notes=notes,
        outcome=payload.outcome,
        actual_duration=payload.actual_duration,
        attachments=[a.model_copy() for a in payload.attachments],
    )


def skip(task: Task, now: datetime) -> Task:
    """pending|in_progress -> skipped"""
    _guard(task, TaskAction.SKIP)
    return _transition(task, TaskAction.SKIP, now)


def dismiss(task: Task, now: datetime) -> Task:
    """pending|in_progress -> dismissed，调度字段保留用于审计和恢复"""
    _guard(task, TaskAction.DISMISS)
    return _transition(task, TaskAction.DISMISS, now, dismissed_at=now)


def snooze(task: Task, until: datetime | None, reason: str, now: datetime) -> Task:
    """pending|in_progress -> snoozed

    首次推迟时记录 original_scheduled_at；每次推迟追加一条 postpone 记录。
    """
    _guard(task, TaskAction.SNOOZE)
    if until is None:
        raise ValidationFailedError("snoozed_until", "Snooze target time is required")
    if until.tzinfo is None:
        raise ValidationFailedError(
            "snoozed_until", "Snooze target time must include a timezone offset"
        )
    if not reason or not reason.strip():
        raise ValidationFailedError("reason", "Snooze reason is required")

    record = PostponeRecord(
        timestamp=now,
        reason=reason.strip(),
        postponed_from=task.scheduled_at,
        postponed_to=until,
    )
    return _transition(
        task,
        TaskAction.SNOOZE,
        now,
        snoozed_until=until,
        original_scheduled_at=task.original_scheduled_at or task.scheduled_at,
        postpone_history=[*task.postpone_history, record],
    )


def restore(task: Task, now: datetime) -> Task:
    """snoozed|dismissed -> pending

    清除 snoozed_until 和 dismissed_at；postpone_history 与 scheduled_at 保持不变。
    """
    _guard(task, TaskAction.RESTORE)
    return _transition(
        task,
        TaskAction.RESTORE,
        now,
        snoozed_until=None,
        dismissed_at=None,
    )


def apply_action(
    task: Task,
    action: TaskAction,
    now: datetime,
    *,
    payload: CompletionPayload | None = None,
    until: datetime | None = None,
    reason: str = "",
) -> Task:
    """按 action 分发到对应的流转函数"""
    if action == TaskAction.START:
        return start(task, now)
    if action == TaskAction.COMPLETE:
        return complete(task, payload or CompletionPayload(), now)
    if action == TaskAction.SKIP:
        return skip(task, now)
    if action == TaskAction.DISMISS:
        return dismiss(task, now)
    if action == TaskAction.SNOOZE:
        return snooze(task, until, reason, now)
    return restore(task, now)
