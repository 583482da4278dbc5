"""Salesdesk Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    ACTION_TRANSITIONS,
    ACTIVE_STATES,
    ARCHIVED_STATES,
    PRIORITY_ORDER,
    TERMINAL_STATES,
    ExpectedOutputType,
    TaskAction,
    TaskKind,
    TaskOutcome,
    TaskPriority,
    TaskStatus,
    target_status,
    validate_transition,
)
from .profile import (
    DEFAULT_COMMUNICATION_STYLE,
    AttachmentSummary,
    CustomContext,
    CustomContextUpdate,
    HistoryEntry,
    Profile,
    ProfileStats,
)
from .task import (
    ExpectedOutput,
    PostponeRecord,
    Task,
    TaskAttachment,
    TaskFilter,
    TaskGuidance,
)

__all__ = [
    # 枚举
    "TaskStatus",
    "TaskAction",
    "TaskKind",
    "TaskPriority",
    "TaskOutcome",
    "ExpectedOutputType",
    # 状态机
    "ACTION_TRANSITIONS",
    "ACTIVE_STATES",
    "ARCHIVED_STATES",
    "TERMINAL_STATES",
    "PRIORITY_ORDER",
    "validate_transition",
    "target_status",
    # Task
    "Task",
    "TaskAttachment",
    "TaskGuidance",
    "ExpectedOutput",
    "PostponeRecord",
    "TaskFilter",
    # Profile
    "Profile",
    "ProfileStats",
    "HistoryEntry",
    "AttachmentSummary",
    "CustomContext",
    "CustomContextUpdate",
    "DEFAULT_COMMUNICATION_STYLE",
]
