"""AI 上下文路由

GET /api/context: 所有画像摘要（管理员视图）
GET /api/context/{assignee_id}: 画像详情（不存在时返回 version 0 的空画像）
PUT /api/context/{assignee_id}/custom: 局部更新管理员自定义上下文
GET /api/context/{assignee_id}/prompt: prompt 格式化文本
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from salesdesk.core.exceptions import SalesdeskError
from salesdesk.core.models import CustomContextUpdate
from starlette.responses import PlainTextResponse

from ..deps import get_context_service
from ..errors import error_response
from ..services.context_service import ContextService

router = APIRouter()


class UpdateCustomContextRequest(BaseModel):
    """自定义上下文更新请求体"""

    seller_name: str | None = None
    custom_context: CustomContextUpdate = Field(default_factory=CustomContextUpdate)


class ProfileSummary(BaseModel):
    """画像摘要（列表项）"""

    assignee_id: str
    seller_name: str
    total_completed: int
    success_rate: int
    version: int
    updated_at: str | None


@router.get("/api/context")
async def list_contexts(service: ContextService = Depends(get_context_service)):
    try:
        profiles = await service.list_profiles()
    except SalesdeskError as e:
        return error_response(e)
    return [
        ProfileSummary(
            assignee_id=p.assignee_id,
            seller_name=p.seller_name,
            total_completed=p.stats.total_completed,
            success_rate=p.stats.success_rate,
            version=p.version,
            updated_at=p.updated_at.isoformat() if p.updated_at else None,
        ).model_dump()
        for p in profiles
    ]


@router.get("/api/context/{assignee_id}")
async def get_context(
    assignee_id: str,
    service: ContextService = Depends(get_context_service),
):
    try:
        profile = await service.get_or_empty_profile(assignee_id)
    except SalesdeskError as e:
        return error_response(e)
    return profile.model_dump(mode="json")


@router.put("/api/context/{assignee_id}/custom")
async def update_custom_context(
    assignee_id: str,
    body: UpdateCustomContextRequest,
    service: ContextService = Depends(get_context_service),
):
    """未提供的字段保持原值；不影响任务派生的 history / stats"""
    try:
        profile = await service.update_custom_context(
            assignee_id, body.seller_name, body.custom_context
        )
    except SalesdeskError as e:
        return error_response(e)
    return profile.model_dump(mode="json")


@router.get("/api/context/{assignee_id}/prompt")
async def get_context_prompt(
    assignee_id: str,
    service: ContextService = Depends(get_context_service),
):
    try:
        text = await service.format_for_prompt(assignee_id)
    except SalesdeskError as e:
        return error_response(e)
    return PlainTextResponse(text)
