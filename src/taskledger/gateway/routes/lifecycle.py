"""任务生命周期路由

POST /api/tasks: 创建任务（任何调用者）
POST /api/tasks/{task_id}/assign: 指派任务（仅创建者）
POST /api/tasks/{task_id}/complete: 完成任务（仅执行者，需出示本人 profile）
POST /api/tasks/{task_id}/cancel: 取消任务（需管理员凭证）

失败时返回 {"error": {"code", "message"}}，状态码见 errors.ERROR_STATUS_CODES。
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import AfterValidator, BaseModel, Field
from starlette.responses import JSONResponse
from taskledger.core.capability import AdminCapability
from taskledger.core.ledger import TaskLedger

from ..deps import get_admin_capability, get_caller_identity, get_ledger
from .tasks import EventView

router = APIRouter()


def _require_utf8(value: str) -> str:
    """拒绝无法编码为 UTF-8 的文本（如 JSON 中孤立的 \\ud800 代理项）"""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValueError("must be valid UTF-8 text") from e
    return value


Utf8Str = Annotated[str, AfterValidator(_require_utf8)]


class CreateTaskRequest(BaseModel):
    """创建任务请求（reward_points 的正数校验由账本完成）"""

    title: Utf8Str = Field(default="")
    description: Utf8Str = Field(default="")
    reward_points: int


class AssignTaskRequest(BaseModel):
    """指派任务请求"""

    assignee: Utf8Str = Field(min_length=1)


class CompleteTaskRequest(BaseModel):
    """完成任务请求"""

    profile_id: Utf8Str = Field(min_length=1)


class LifecycleResponse(BaseModel):
    """生命周期操作响应：本次发出的事件"""

    task_id: int
    events: list[EventView]


@router.post("/api/tasks")
async def create_task(
    body: CreateTaskRequest,
    caller: str = Depends(get_caller_identity),
    ledger: TaskLedger = Depends(get_ledger),
):
    """创建任务"""
    task_id, events = await ledger.create_task(
        body.title, body.description, body.reward_points, caller
    )
    return JSONResponse(
        status_code=201,
        content=LifecycleResponse(
            task_id=task_id,
            events=[EventView.from_event(e) for e in events],
        ).model_dump(),
    )


@router.post("/api/tasks/{task_id}/assign", response_model=LifecycleResponse)
async def assign_task(
    task_id: int,
    body: AssignTaskRequest,
    caller: str = Depends(get_caller_identity),
    ledger: TaskLedger = Depends(get_ledger),
):
    """指派任务"""
    events = await ledger.assign_task(task_id, body.assignee, caller)
    return LifecycleResponse(
        task_id=task_id,
        events=[EventView.from_event(e) for e in events],
    )


@router.post("/api/tasks/{task_id}/complete", response_model=LifecycleResponse)
async def complete_task(
    task_id: int,
    body: CompleteTaskRequest,
    caller: str = Depends(get_caller_identity),
    ledger: TaskLedger = Depends(get_ledger),
):
    """完成任务"""
    events = await ledger.complete_task(task_id, body.profile_id, caller)
    return LifecycleResponse(
        task_id=task_id,
        events=[EventView.from_event(e) for e in events],
    )


@router.post("/api/tasks/{task_id}/cancel", response_model=LifecycleResponse)
async def cancel_task(
    task_id: int,
    caller: str = Depends(get_caller_identity),
    capability: AdminCapability = Depends(get_admin_capability),
    ledger: TaskLedger = Depends(get_ledger),
):
    """取消任务"""
    events = await ledger.cancel_task(capability, task_id, caller)
    return LifecycleResponse(
        task_id=task_id,
        events=[EventView.from_event(e) for e in events],
    )
