"""Projection 重建模块

从 events 表重建 tasks 表与注册表计数器，确保事件溯源的一致性。
支持单事件应用和全量重建两种模式。
"""

import asyncio
import contextlib
import time

import aiosqlite
import structlog

from .models.enums import EventType, TaskStatus
from .models.event import Event
from .models.task import Task
from .store.event_store import SqliteEventStore
from .store.task_store import SqliteTaskStore
from .store.transaction import ledger_transaction

log = structlog.get_logger()


def apply_event(tasks: dict[int, Task], event: Event) -> None:
    """将单个事件应用到 Task 状态（内存中操作）

    Args:
        tasks: task_id -> Task 的映射表（会被就地修改）
        event: 要应用的事件
    """
    task_id = event.task_id
    payload = event.payload

    if event.type == EventType.TASK_CREATED:
        tasks[task_id] = Task(
            task_id=task_id,
            title=payload.get("title", ""),
            description=payload.get("description", ""),
            reward_points=payload["reward_points"],
            status=TaskStatus.PENDING,
            creator=payload.get("creator", event.actor),
            assignee=None,
            created_at=event.ts,
            updated_at=event.ts,
        )
        return

    if task_id not in tasks:
        # USER_LEVELED_UP 等事件不影响 tasks 表
        return

    task = tasks[task_id]
    if event.type == EventType.TASK_ASSIGNED:
        tasks[task_id] = task.model_copy(
            update={"assignee": payload.get("assignee"), "updated_at": event.ts}
        )
    elif event.type == EventType.TASK_COMPLETED:
        tasks[task_id] = task.model_copy(
            update={"status": TaskStatus.COMPLETED, "updated_at": event.ts}
        )
    elif event.type == EventType.TASK_CANCELLED:
        tasks[task_id] = task.model_copy(
            update={"status": TaskStatus.CANCELLED, "updated_at": event.ts}
        )


async def rebuild_all(
    conn: aiosqlite.Connection,
    event_store: SqliteEventStore,
    task_store: SqliteTaskStore,
    write_lock: asyncio.Lock | None = None,
) -> int:
    """全量重建：清空 tasks 表后按 seq 顺序重放所有事件

    读取事件与重写 tasks 表在同一个 BEGIN IMMEDIATE 事务内完成：
    其他连接无法在读取之后、重写之前提交新任务，失败时回滚到重建前状态。
    与账本共用连接时需传入 StoreGroup.write_lock。

    Returns:
        处理的事件数量
    """
    start = time.monotonic()
    tasks: dict[int, Task] = {}

    async with write_lock or contextlib.nullcontext():
        async with ledger_transaction(conn):
            events = await event_store.get_all_events()
            for event in events:
                apply_event(tasks, event)

            await task_store.reset()
            # 按 task_id 顺序插入，insert_task 会校验并推进计数器
            for task_id in sorted(tasks):
                await task_store.insert_task(tasks[task_id])

    duration_ms = int((time.monotonic() - start) * 1000)
    log.info(
        "projection_rebuilt",
        event_count=len(events),
        task_count=len(tasks),
        duration_ms=duration_ms,
    )
    return len(events)
