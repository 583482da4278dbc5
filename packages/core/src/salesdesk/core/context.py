"""AI 上下文聚合

将完成的任务折叠进 assignee 的 Profile：
1. 构建 history 条目
2. 插入到 history 头部并截断到最近 N 条
3. 从截断后的 history 全量重算统计（不做增量调整，避免淘汰旧条目后统计漂移）
"""

from datetime import datetime

from .config import (
    MAX_DERIVED_SIGNALS,
    OBJECTION_KEYWORDS,
    TACTICS_PER_TASK,
)
from .models.enums import TaskOutcome
from .models.profile import (
    AttachmentSummary,
    CustomContextUpdate,
    HistoryEntry,
    Profile,
    ProfileStats,
)
from .models.task import Task
from .views import round_half_up


def empty_profile(assignee_id: str) -> Profile:
    """不存在画像时的空白占位（version 0）"""
    return Profile(assignee_id=assignee_id)


def _dedupe(items: list[str], limit: int) -> list[str]:
    """保序去重并截断"""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
        if len(result) >= limit:
            break
    return result


def detect_objection(notes: str) -> bool:
    """备注中是否包含异议关键字"""
    lowered = notes.lower()
    return any(keyword in lowered for keyword in OBJECTION_KEYWORDS)


def build_history_entry(
    task: Task,
    attachment_summaries: list[AttachmentSummary] | None,
    now: datetime,
) -> HistoryEntry:
    """从完成的任务构建 history 条目

    缺失 completed_at 时使用 now；缺失 outcome 时按 success 处理。
    未提供 attachment_summaries 时使用任务自身附件的摘要。
    """
    guidance = task.guidance
    if attachment_summaries is None:
        attachment_summaries = [
            AttachmentSummary(
                uri=a.uri,
                file_name=a.file_name,
                transcription=a.transcription,
                summary=a.summary,
            )
            for a in task.attachments
        ]

    return HistoryEntry(
        task_id=task.task_id,
        kind=task.kind,
        title=task.title,
        description=task.description,
        completed_at=task.completed_at or now,
        outcome=task.outcome or TaskOutcome.SUCCESS,
        objectives=list(guidance.objectives) if guidance else [],
        best_practices=list(guidance.best_practices) if guidance else [],
        common_mistakes=list(guidance.common_mistakes) if guidance else [],
        script=guidance.script if guidance else "",
        notes=task.notes,
        actual_duration=task.actual_duration,
        attachments=list(attachment_summaries),
        ai_analysis=task.ai_analysis,
        lessons_learned=list(task.lessons_learned),
    )


def compute_stats(history: list[HistoryEntry]) -> ProfileStats:
    """从 history 全量计算统计"""
    total = len(history)
    if total == 0:
        return ProfileStats()

    successes = [e for e in history if e.outcome == TaskOutcome.SUCCESS]
    success_rate = round_half_up(len(successes) / total * 100)

    durations = [e.actual_duration for e in history if e.actual_duration is not None]
    average_duration = round_half_up(sum(durations) / len(durations)) if durations else 0

    objections = [f"Obiezione in {e.title}" for e in history if detect_objection(e.notes)]

    tactics: list[str] = []
    for entry in successes:
        tactics.extend(entry.best_practices[:TACTICS_PER_TASK])

    return ProfileStats(
        total_completed=total,
        success_rate=success_rate,
        average_duration=average_duration,
        objection_signals=_dedupe(objections, MAX_DERIVED_SIGNALS),
        effective_tactics=_dedupe(tactics, MAX_DERIVED_SIGNALS),
    )


def _bump(profile: Profile, now: datetime) -> dict:
    return {
        "version": profile.version + 1,
        "updated_at": now,
        "created_at": profile.created_at or now,
    }


def contains_task(profile: Profile, task_id: str) -> bool:
    return any(entry.task_id == task_id for entry in profile.history)


def fold_completion(
    profile: Profile,
    entry: HistoryEntry,
    limit: int,
    now: datetime,
) -> Profile:
    """插入新条目、截断 history、重算统计、递增版本"""
    history = [entry, *profile.history][:limit]
    return profile.model_copy(
        deep=True,
        update={
            "history": history,
            "stats": compute_stats(history),
            "last_task_added_at": now,
            **_bump(profile, now),
        },
    )


def merge_custom_context(
    profile: Profile,
    seller_name: str | None,
    update: CustomContextUpdate,
    now: datetime,
) -> Profile:
    """浅合并自定义上下文：提供的字段覆盖旧值，未提供的字段保持不变

    不触碰 history 和 stats。
    """
    changes = update.model_dump(exclude_none=True)
    custom = profile.custom_context.model_copy(deep=True, update=changes)
    return profile.model_copy(
        deep=True,
        update={
            "seller_name": seller_name if seller_name is not None else profile.seller_name,
            "custom_context": custom,
            **_bump(profile, now),
        },
    )
