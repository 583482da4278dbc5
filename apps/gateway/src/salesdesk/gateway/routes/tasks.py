"""任务路由

POST /api/tasks: 创建任务
GET  /api/tasks/{task_id}: 任务详情
POST /api/tasks/{task_id}/{start|complete|skip|dismiss|snooze|restore}: 状态流转
GET  /api/assignees/{assignee_id}/day: 今天/明天任务桶
GET  /api/assignees/{assignee_id}/archive: 归档视图

错误映射见 errors.error_response：404 / 409 / 422 / 503。
"""

from collections.abc import Awaitable
from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from salesdesk.core.exceptions import SalesdeskError
from salesdesk.core.lifecycle import CompletionPayload
from salesdesk.core.models import (
    AttachmentSummary,
    Task,
    TaskAttachment,
    TaskGuidance,
    TaskKind,
    TaskOutcome,
    TaskPriority,
)
from salesdesk.core.views import DayBucket
from starlette.responses import JSONResponse

from ..deps import get_task_service
from ..errors import error_response
from ..services.task_service import TaskService

router = APIRouter()


class CreateTaskRequest(BaseModel):
    """创建任务请求体"""

    assignee_id: str
    title: str
    scheduled_at: datetime
    kind: TaskKind = TaskKind.OTHER
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    guidance: TaskGuidance | None = None
    client_name: str = ""
    deal_title: str = ""


class CompleteTaskRequest(BaseModel):
    """完成任务请求体"""

    notes: str = ""
    outcome: TaskOutcome | None = None
    actual_duration: int | None = None
    attachments: list[TaskAttachment] = Field(default_factory=list)
    attachment_summaries: list[AttachmentSummary] | None = Field(
        default=None,
        description="附件提取摘要，缺省时使用 attachments 自带的摘要",
    )


class SnoozeTaskRequest(BaseModel):
    """推迟任务请求体"""

    until: datetime | None = None
    reason: str = ""


def _task_json(task: Task) -> dict:
    return task.model_dump(mode="json")


def _bucket_json(bucket: DayBucket) -> dict:
    return {
        "date": bucket.day.isoformat(),
        "tasks": [_task_json(t) for t in bucket.tasks],
        "pending_count": len(bucket.pending),
        "completed_count": len(bucket.completed),
        "completion_ratio": bucket.completion_ratio,
    }


async def _task_response(call: Awaitable[Task], status_code: int = 200) -> JSONResponse:
    try:
        task = await call
    except SalesdeskError as e:
        return error_response(e)
    return JSONResponse(status_code=status_code, content=_task_json(task))


@router.post("/api/tasks")
async def create_task(
    body: CreateTaskRequest,
    service: TaskService = Depends(get_task_service),
):
    """创建 pending 任务，返回 201"""
    return await _task_response(
        service.create_task(
            assignee_id=body.assignee_id,
            title=body.title,
            scheduled_at=body.scheduled_at,
            kind=body.kind,
            description=body.description,
            priority=body.priority,
            guidance=body.guidance,
            client_name=body.client_name,
            deal_title=body.deal_title,
        ),
        status_code=201,
    )


@router.get("/api/tasks/{task_id}")
async def get_task(task_id: str, service: TaskService = Depends(get_task_service)):
    return await _task_response(service.get_task(task_id))


@router.post("/api/tasks/{task_id}/start")
async def start_task(task_id: str, service: TaskService = Depends(get_task_service)):
    return await _task_response(service.start(task_id))


@router.post("/api/tasks/{task_id}/complete")
async def complete_task(
    task_id: str,
    body: CompleteTaskRequest,
    service: TaskService = Depends(get_task_service),
):
    """完成任务：notes、outcome 必填；期望产出要求文档时必须附带附件"""
    payload = CompletionPayload(
        notes=body.notes,
        outcome=body.outcome,
        actual_duration=body.actual_duration,
        attachments=body.attachments,
    )
    return await _task_response(
        service.complete(task_id, payload, body.attachment_summaries)
    )


@router.post("/api/tasks/{task_id}/skip")
async def skip_task(task_id: str, service: TaskService = Depends(get_task_service)):
    return await _task_response(service.skip(task_id))


@router.post("/api/tasks/{task_id}/dismiss")
async def dismiss_task(task_id: str, service: TaskService = Depends(get_task_service)):
    return await _task_response(service.dismiss(task_id))


@router.post("/api/tasks/{task_id}/snooze")
async def snooze_task(
    task_id: str,
    body: SnoozeTaskRequest,
    service: TaskService = Depends(get_task_service),
):
    return await _task_response(service.snooze(task_id, body.until, body.reason))


@router.post("/api/tasks/{task_id}/restore")
async def restore_task(task_id: str, service: TaskService = Depends(get_task_service)):
    return await _task_response(service.restore(task_id))


@router.get("/api/assignees/{assignee_id}/day")
async def day_view(
    assignee_id: str,
    today: date = Query(description="assignee 本地日期（YYYY-MM-DD）"),
    service: TaskService = Depends(get_task_service),
):
    """今天 / 明天任务桶，明天 = today + 1"""
    try:
        partition = await service.partition_by_day(assignee_id, today)
    except SalesdeskError as e:
        return error_response(e)
    return {
        "today": _bucket_json(partition.today),
        "tomorrow": _bucket_json(partition.tomorrow),
    }


@router.get("/api/assignees/{assignee_id}/archive")
async def archive_view(
    assignee_id: str,
    service: TaskService = Depends(get_task_service),
):
    """snoozed（按 snoozed_until 升序）与 dismissed（按 dismissed_at 降序）"""
    try:
        view = await service.archived_view(assignee_id)
    except SalesdeskError as e:
        return error_response(e)
    return {
        "snoozed": [_task_json(t) for t in view.snoozed],
        "dismissed": [_task_json(t) for t in view.dismissed],
    }
