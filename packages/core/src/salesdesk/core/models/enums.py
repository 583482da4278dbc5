"""枚举定义 -- 任务状态机与分类

包含 TaskStatus 状态机、TaskAction 操作、TaskKind/TaskPriority/TaskOutcome 分类枚举，
以及 ACTION_TRANSITIONS 合法流转映射和 ACTIVE/ARCHIVED/TERMINAL 状态集合。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """Task 状态机"""

    # 活跃状态
    PENDING = "pending"
    IN_PROGRESS = "in_progress"

    # 终态
    COMPLETED = "completed"
    SKIPPED = "skipped"

    # 归档状态（仅可通过 restore 恢复）
    DISMISSED = "dismissed"
    SNOOZED = "snoozed"


class TaskAction(StrEnum):
    """任务操作（状态流转的触发动作）"""

    START = "start"
    COMPLETE = "complete"
    SKIP = "skip"
    DISMISS = "dismiss"
    SNOOZE = "snooze"
    RESTORE = "restore"


class TaskKind(StrEnum):
    """任务类型"""

    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    DEMO = "demo"
    FOLLOW_UP = "follow_up"
    RESEARCH = "research"
    ADMIN = "admin"
    OTHER = "other"


class TaskPriority(StrEnum):
    """任务优先级"""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskOutcome(StrEnum):
    """任务完成结果（仅在 complete 时设置）"""

    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
    NO_ANSWER = "no_answer"


class ExpectedOutputType(StrEnum):
    """任务期望产出类型"""

    TEXT = "text"
    STRUCTURED_DATA = "structured_data"
    GOOGLE_SHEET = "google_sheet"
    DOCUMENT = "document"
    MIXED = "mixed"


ACTIVE_STATES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.PENDING, TaskStatus.IN_PROGRESS}
)

ARCHIVED_STATES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.SNOOZED, TaskStatus.DISMISSED}
)

TERMINAL_STATES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.COMPLETED, TaskStatus.SKIPPED}
)

# 合法流转：action -> (允许的源状态集合, 目标状态)
ACTION_TRANSITIONS: dict[TaskAction, tuple[frozenset[TaskStatus], TaskStatus]] = {
    TaskAction.START: (frozenset({TaskStatus.PENDING}), TaskStatus.IN_PROGRESS),
    TaskAction.COMPLETE: (frozenset({TaskStatus.IN_PROGRESS}), TaskStatus.COMPLETED),
    TaskAction.SKIP: (ACTIVE_STATES, TaskStatus.SKIPPED),
    TaskAction.DISMISS: (ACTIVE_STATES, TaskStatus.DISMISSED),
    TaskAction.SNOOZE: (ACTIVE_STATES, TaskStatus.SNOOZED),
    # restore 仅对归档任务有效，pending 任务上调用视为非法流转
    TaskAction.RESTORE: (ARCHIVED_STATES, TaskStatus.PENDING),
}

# 排序用优先级权重
PRIORITY_ORDER: dict[TaskPriority, int] = {
    TaskPriority.CRITICAL: 0,
    TaskPriority.HIGH: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 3,
}


def validate_transition(from_status: TaskStatus, action: TaskAction) -> bool:
    """验证状态流转是否合法

    Args:
        from_status: 当前状态
        action: 请求的操作

    Returns:
        True 如果流转合法，否则 False
    """
    allowed, _ = ACTION_TRANSITIONS[action]
    return from_status in allowed


def target_status(action: TaskAction) -> TaskStatus:
    """返回 action 成功后的目标状态"""
    return ACTION_TRANSITIONS[action][1]
