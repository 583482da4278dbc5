"""Profile Domain Model -- 每个销售的 AI 上下文画像

history 为最近 N 条完成任务摘要（最新在前），
stats 每次写入时从 history 全量重算，
custom_context 由管理员编辑，与任务派生字段相互独立。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import TaskKind, TaskOutcome

DEFAULT_COMMUNICATION_STYLE = "Professionale e di supporto"


class AttachmentSummary(BaseModel):
    """历史条目中的附件摘要"""

    uri: str = Field(default="")
    file_name: str = Field(default="")
    transcription: str | None = Field(default=None)
    summary: str | None = Field(default=None)


class HistoryEntry(BaseModel):
    """一条已完成任务的摘要"""

    task_id: str
    kind: TaskKind
    title: str
    description: str = ""
    completed_at: datetime
    outcome: TaskOutcome
    objectives: list[str] = Field(default_factory=list)
    best_practices: list[str] = Field(default_factory=list)
    common_mistakes: list[str] = Field(default_factory=list)
    script: str = ""
    notes: str = ""
    actual_duration: int | None = None
    attachments: list[AttachmentSummary] = Field(default_factory=list)
    ai_analysis: str = ""
    lessons_learned: list[str] = Field(default_factory=list)


class ProfileStats(BaseModel):
    """从 history 派生的聚合统计"""

    total_completed: int = 0
    success_rate: int = Field(default=0, description="成功率（整数百分比）")
    average_duration: int = Field(default=0, description="平均耗时（分钟）")
    objection_signals: list[str] = Field(default_factory=list)
    effective_tactics: list[str] = Field(default_factory=list)


class CustomContext(BaseModel):
    """管理员编写的自定义上下文"""

    specific_instructions: str = ""
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    learning_goals: list[str] = Field(default_factory=list)
    communication_style: str = DEFAULT_COMMUNICATION_STYLE
    industry_knowledge: str = ""
    company_guidelines: str = ""


class CustomContextUpdate(BaseModel):
    """自定义上下文的局部更新：未提供（None）的字段保持原值"""

    specific_instructions: str | None = None
    strengths: list[str] | None = None
    weaknesses: list[str] | None = None
    learning_goals: list[str] | None = None
    communication_style: str | None = None
    industry_knowledge: str | None = None
    company_guidelines: str | None = None


class Profile(BaseModel):
    """每个 assignee 的派生画像，可由完成任务重建"""

    assignee_id: str
    seller_name: str = ""
    history: list[HistoryEntry] = Field(default_factory=list)
    stats: ProfileStats = Field(default_factory=ProfileStats)
    custom_context: CustomContext = Field(default_factory=CustomContext)
    version: int = Field(default=0, ge=0, description="每次写入递增")
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_task_added_at: datetime | None = None
