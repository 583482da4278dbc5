"""Task Domain Model

Task 是分配给某个销售（assignee）的一个工作单元。
status 只能通过 lifecycle 模块中的流转函数修改；
postpone_history 只追加，不修改、不截断。
"""

from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator

from .enums import (
    ExpectedOutputType,
    TaskKind,
    TaskOutcome,
    TaskPriority,
    TaskStatus,
)


class ExpectedOutput(BaseModel):
    """任务期望产出描述（由外部生成器提供）"""

    model_config = ConfigDict(extra="allow")

    type: ExpectedOutputType = Field(default=ExpectedOutputType.TEXT, description="产出类型")
    description: str = Field(default="", description="产出描述")
    example: str | None = Field(default=None, description="产出示例")
    fields: list[str] = Field(default_factory=list, description="结构化产出字段")
    document_required: bool = Field(default=False, description="是否必须上传文档")

    @property
    def requires_attachment(self) -> bool:
        """完成任务时是否必须附带至少一个附件"""
        return self.document_required or self.type == ExpectedOutputType.DOCUMENT


class TaskGuidance(BaseModel):
    """AI 指导内容 -- 对 core 不透明，仅存储和转发

    允许额外字段，原样透传。
    """

    model_config = ConfigDict(extra="allow")

    rationale: str = Field(default="", description="AI 创建此任务的理由")
    objectives: list[str] = Field(default_factory=list)
    script: str = Field(default="", description="话术/脚本")
    talking_points: list[str] = Field(default_factory=list)
    best_practices: list[str] = Field(default_factory=list)
    common_mistakes: list[str] = Field(default_factory=list)
    expected_output: ExpectedOutput | None = Field(default=None)


class TaskAttachment(BaseModel):
    """任务附件引用"""

    uri: str = Field(description="附件 URI（不透明）")
    file_name: str = Field(default="", description="文件名，缺省时从 URI 推导")
    summary: str | None = Field(default=None, description="提取的摘要")
    transcription: str | None = Field(default=None, description="提取的全文/转写")

    @model_validator(mode="after")
    def _derive_file_name(self) -> "TaskAttachment":
        if not self.file_name:
            path = unquote(urlparse(self.uri).path)
            self.file_name = PurePosixPath(path).name or self.uri
        return self


class PostponeRecord(BaseModel):
    """一次 snooze 的审计记录"""

    timestamp: AwareDatetime = Field(description="推迟操作时间")
    reason: str = Field(description="推迟原因")
    postponed_from: AwareDatetime = Field(description="推迟前的 scheduled_at")
    postponed_to: AwareDatetime = Field(description="推迟目标时间")


class Task(BaseModel):
    """Task 数据模型

    不变量：
    - 所有时间字段必须带时区
    - completed_at 非空当且仅当 status == completed
    - dismissed_at 非空当且仅当 status == dismissed
    - original_scheduled_at 一经设置不再覆盖
    """

    task_id: str = Field(description="唯一标识，ULID 格式")
    assignee_id: str = Field(description="负责人 ID")
    kind: TaskKind = Field(default=TaskKind.OTHER, description="任务类型")
    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="优先级")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="当前状态")

    # 调度
    scheduled_at: AwareDatetime = Field(description="计划执行时间")
    original_scheduled_at: AwareDatetime | None = Field(
        default=None, description="首次推迟前的计划时间"
    )
    snoozed_until: AwareDatetime | None = Field(default=None, description="推迟到的时间")

    # 执行记录
    started_at: AwareDatetime | None = Field(default=None)
    completed_at: AwareDatetime | None = Field(default=None)
    dismissed_at: AwareDatetime | None = Field(default=None)
    notes: str = Field(default="", description="销售填写的备注")
    outcome: TaskOutcome | None = Field(default=None, description="完成结果")
    actual_duration: int | None = Field(default=None, ge=0, description="实际耗时（分钟）")
    attachments: list[TaskAttachment] = Field(default_factory=list)

    # 外部提供的指导内容与分析
    guidance: TaskGuidance | None = Field(default=None)
    ai_analysis: str = Field(default="", description="下游 AI 对备注的分析")
    lessons_learned: list[str] = Field(default_factory=list)

    # 关联对象（不透明标签）
    client_name: str = Field(default="")
    deal_title: str = Field(default="")

    postpone_history: list[PostponeRecord] = Field(default_factory=list)

    created_at: AwareDatetime = Field(description="创建时间")
    updated_at: AwareDatetime = Field(description="更新时间")


class TaskFilter(BaseModel):
    """TaskStore.list_tasks 查询条件"""

    statuses: set[TaskStatus] | None = Field(default=None, description="状态白名单")
    scheduled_from: AwareDatetime | None = Field(
        default=None, description="scheduled_at 下界（含）"
    )
    scheduled_before: AwareDatetime | None = Field(
        default=None, description="scheduled_at 上界（不含）"
    )

    def matches(self, task: Task) -> bool:
        if self.statuses is not None and task.status not in self.statuses:
            return False
        if self.scheduled_from is not None and task.scheduled_at < self.scheduled_from:
            return False
        if self.scheduled_before is not None and task.scheduled_at >= self.scheduled_before:
            return False
        return True
