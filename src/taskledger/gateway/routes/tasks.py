"""任务查询路由

GET /api/tasks: 任务列表查询，支持 status 数值筛选。
GET /api/tasks/count: 历史创建任务总数。
GET /api/tasks/{task_id}: 任务详情查询，含 events。
GET /api/tasks/{task_id}/available: 任务是否可被指派。
GET /api/tasks/{task_id}/{field}: 单字段查询。
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from taskledger.core.config import NO_IDENTITY
from taskledger.core.ledger import TaskLedger
from taskledger.core.models import Event, Task, TaskStatus

from ..deps import get_ledger
from ..errors import error_response

router = APIRouter()


class TaskView(BaseModel):
    """任务对外视图（status 为数值编码，assignee 未设置时为空字符串）"""

    task_id: int
    title: str
    description: str
    reward_points: int
    status: int
    creator: str
    assignee: str
    created_at: str
    updated_at: str

    @classmethod
    def from_task(cls, task: Task) -> "TaskView":
        return cls(
            task_id=task.task_id,
            title=task.title,
            description=task.description,
            reward_points=task.reward_points,
            status=int(task.status),
            creator=task.creator,
            assignee=task.assignee if task.assignee is not None else NO_IDENTITY,
            created_at=task.created_at.isoformat(),
            updated_at=task.updated_at.isoformat(),
        )


class EventView(BaseModel):
    """事件对外视图"""

    event_id: str
    seq: int
    ts: str
    type: str
    task_id: int | None
    actor: str
    payload: dict

    @classmethod
    def from_event(cls, event: Event) -> "EventView":
        return cls(
            event_id=event.event_id,
            seq=event.seq,
            ts=event.ts.isoformat(),
            type=event.type.value,
            task_id=event.task_id,
            actor=event.actor,
            payload=event.payload,
        )


class TaskListResponse(BaseModel):
    """任务列表响应"""

    tasks: list[TaskView]


@router.get("/api/tasks", response_model=TaskListResponse)
async def list_tasks(
    status: int | None = Query(default=None, description="按状态数值筛选：0/1/2"),
    ledger: TaskLedger = Depends(get_ledger),
):
    """查询任务列表，按 task_id 正序"""
    if status is not None and status not in {s.value for s in TaskStatus}:
        return error_response(400, "INVALID_STATUS", f"Unknown status code {status}")
    tasks = await ledger.list_tasks(TaskStatus(status) if status is not None else None)
    return TaskListResponse(tasks=[TaskView.from_task(t) for t in tasks])


@router.get("/api/tasks/count")
async def task_count(ledger: TaskLedger = Depends(get_ledger)):
    """历史创建任务总数"""
    return {"count": await ledger.task_count()}


@router.get("/api/tasks/{task_id}")
async def get_task_detail(task_id: int, ledger: TaskLedger = Depends(get_ledger)):
    """查询任务详情，包含关联的事件历史"""
    task, events = await ledger.get_task_with_events(task_id)
    return {
        "task": TaskView.from_task(task).model_dump(),
        "events": [EventView.from_event(e).model_dump() for e in events],
    }


@router.get("/api/tasks/{task_id}/available")
async def is_task_available(task_id: int, ledger: TaskLedger = Depends(get_ledger)):
    """任务是否可被指派"""
    return {"task_id": task_id, "available": await ledger.is_task_available(task_id)}


@router.get("/api/tasks/{task_id}/{field}")
async def get_task_field(
    task_id: int,
    field: str,
    ledger: TaskLedger = Depends(get_ledger),
):
    """单字段查询"""
    try:
        value = await ledger.get_task_field(task_id, field)
    except ValueError as e:
        return error_response(404, "UNKNOWN_FIELD", str(e))
    return {"task_id": task_id, field: value}
