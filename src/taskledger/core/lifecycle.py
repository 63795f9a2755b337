"""任务生命周期纯状态流转

每个函数只做前置条件校验与状态计算，返回 Transition（新状态 + 事件草稿），
不做任何 I/O。持久化与事件落盘由 TaskLedger 在同一事务内完成，
因此校验失败时不会产生任何部分写入或部分事件。

状态机：
    create_task  -> PENDING
    assign_task  -> PENDING（自环，仅设置 assignee）
    complete_task: PENDING -> COMPLETED
    cancel_task:   PENDING -> CANCELLED
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .config import MAX_POINTS
from .errors import (
    InvalidRewardPointsError,
    NotAssigneeError,
    NotCreatorError,
    PointsOverflowError,
    ProfileMismatchError,
    TaskAlreadyAssignedError,
    TaskNotFoundError,
    TaskNotPendingError,
)
from .leveling import compute_level
from .models import (
    EventDraft,
    EventType,
    Task,
    TaskAssignedPayload,
    TaskCancelledPayload,
    TaskCompletedPayload,
    TaskCreatedPayload,
    TaskStatus,
    UserLeveledUpPayload,
    UserProgress,
    validate_transition,
)


class Transition(BaseModel):
    """一次生命周期操作的计算结果"""

    task: Task
    progress: UserProgress | None = None
    events: list[EventDraft] = Field(default_factory=list)
    created: bool = False


def require_task(task: Task | None, task_id: int) -> Task:
    """任务必须存在"""
    if task is None:
        raise TaskNotFoundError(task_id)
    return task


def require_pending(task: Task, to_status: TaskStatus | None = None) -> None:
    """任务必须处于 PENDING（终态是吸收态）

    传入 to_status 时同时校验该流转在状态机中合法。
    """
    if task.status != TaskStatus.PENDING or (
        to_status is not None and not validate_transition(task.status, to_status)
    ):
        raise TaskNotPendingError(task.task_id, task.status.name)


def create_task(
    task_id: int,
    title: str,
    description: str,
    reward_points: int,
    caller: str,
    now: datetime,
) -> Transition:
    """创建任务：task_id 由调用方按注册表当前 count 分配"""
    if reward_points <= 0 or reward_points > MAX_POINTS:
        raise InvalidRewardPointsError(reward_points)

    task = Task(
        task_id=task_id,
        title=title,
        description=description,
        reward_points=reward_points,
        status=TaskStatus.PENDING,
        creator=caller,
        assignee=None,
        created_at=now,
        updated_at=now,
    )
    event = EventDraft(
        type=EventType.TASK_CREATED,
        task_id=task_id,
        actor=caller,
        payload=TaskCreatedPayload(
            task_id=task_id,
            creator=caller,
            title=title,
            reward_points=reward_points,
            description=description,
        ).model_dump(),
    )
    return Transition(task=task, events=[event], created=True)


def assign_task(
    task: Task | None,
    task_id: int,
    assignee: str,
    caller: str,
    now: datetime,
) -> Transition:
    """指派任务

    校验顺序：存在 -> PENDING -> 未指派 -> 调用者是创建者。
    不存在的任务永远不会走到权限校验。
    """
    current = require_task(task, task_id)
    require_pending(current)
    if current.assignee is not None:
        raise TaskAlreadyAssignedError(task_id)
    if caller != current.creator:
        raise NotCreatorError(task_id, caller)

    updated = current.model_copy(update={"assignee": assignee, "updated_at": now})
    event = EventDraft(
        type=EventType.TASK_ASSIGNED,
        task_id=task_id,
        actor=caller,
        payload=TaskAssignedPayload(task_id=task_id, assignee=assignee).model_dump(),
    )
    return Transition(task=updated, events=[event])


def complete_task(
    task: Task | None,
    task_id: int,
    progress: UserProgress,
    caller: str,
    now: datetime,
) -> Transition:
    """完成任务并累计进度

    校验顺序：进度记录属于调用者 -> 存在 -> PENDING -> 调用者是执行者 -> 累计积分不越界。
    TASK_COMPLETED 必定发出；仅当等级严格提升时追加 USER_LEVELED_UP。
    """
    if progress.owner != caller:
        raise ProfileMismatchError(progress.profile_id, caller)
    current = require_task(task, task_id)
    require_pending(current, TaskStatus.COMPLETED)
    if current.assignee is None or current.assignee != caller:
        raise NotAssigneeError(task_id, caller)

    points_earned = progress.points_earned + current.reward_points
    if points_earned > MAX_POINTS:
        raise PointsOverflowError(progress.profile_id, points_earned)
    new_level = compute_level(points_earned)
    leveled_up = new_level > progress.level

    updated_task = current.model_copy(
        update={"status": TaskStatus.COMPLETED, "updated_at": now}
    )
    updated_progress = progress.model_copy(
        update={
            "tasks_completed": progress.tasks_completed + 1,
            "points_earned": points_earned,
            "level": new_level,
            "updated_at": now,
        }
    )

    events = [
        EventDraft(
            type=EventType.TASK_COMPLETED,
            task_id=task_id,
            actor=caller,
            payload=TaskCompletedPayload(
                task_id=task_id,
                assignee=caller,
                points_awarded=current.reward_points,
            ).model_dump(),
        )
    ]
    if leveled_up:
        events.append(
            EventDraft(
                type=EventType.USER_LEVELED_UP,
                task_id=task_id,
                actor=caller,
                payload=UserLeveledUpPayload(
                    user=caller,
                    new_level=new_level,
                    profile_id=progress.profile_id,
                ).model_dump(),
            )
        )
    return Transition(task=updated_task, progress=updated_progress, events=events)


def cancel_task(
    task: Task | None,
    task_id: int,
    caller: str,
    now: datetime,
) -> Transition:
    """取消任务

    管理员凭证在进入此函数前已于边界处校验。
    已指派但未完成的任务同样可以取消。
    """
    current = require_task(task, task_id)
    require_pending(current, TaskStatus.CANCELLED)

    updated = current.model_copy(
        update={"status": TaskStatus.CANCELLED, "updated_at": now}
    )
    event = EventDraft(
        type=EventType.TASK_CANCELLED,
        task_id=task_id,
        actor=caller,
        payload=TaskCancelledPayload(task_id=task_id, cancelled_by=caller).model_dump(),
    )
    return Transition(task=updated, events=[event])
