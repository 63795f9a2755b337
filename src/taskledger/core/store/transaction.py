"""生命周期原子事务封装

一次生命周期操作的读取、校验、写入与事件追加在同一 SQLite 事务内完成：
任一步骤抛出异常即整体回滚，注册表、进度记录与事件表保持原样。
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

import aiosqlite
from ulid import ULID

from ..lifecycle import Transition
from ..models.event import Event
from .protocols import EventStore, ProgressStore, TaskStore


@asynccontextmanager
async def ledger_transaction(conn: aiosqlite.Connection) -> AsyncIterator[None]:
    """以 BEGIN IMMEDIATE 开启写事务，正常退出提交，异常时回滚并继续抛出"""
    await conn.execute("BEGIN IMMEDIATE")
    try:
        yield
        await conn.commit()
    except BaseException:
        await conn.rollback()
        raise


async def apply_transition(
    task_store: TaskStore,
    progress_store: ProgressStore,
    event_store: EventStore,
    transition: Transition,
    ts: datetime,
) -> list[Event]:
    """在当前事务内落盘一次状态流转

    Args:
        task_store: TaskStore 实例
        progress_store: ProgressStore 实例
        event_store: EventStore 实例
        transition: 纯状态流转函数的计算结果
        ts: 事件时间戳

    Returns:
        已分配 seq / event_id 的事件列表（按发出顺序）

    注意：此函数不提交事务，需在 ledger_transaction 内调用。
    """
    if transition.created:
        await task_store.insert_task(transition.task)
    else:
        await task_store.update_task(transition.task)

    if transition.progress is not None:
        await progress_store.update_progress(transition.progress)

    events: list[Event] = []
    seq = await event_store.get_next_seq()
    for offset, draft in enumerate(transition.events):
        event = Event(
            event_id=str(ULID()),
            seq=seq + offset,
            ts=ts,
            type=draft.type,
            task_id=draft.task_id,
            actor=draft.actor,
            payload=draft.payload,
        )
        await event_store.append_event(event)
        events.append(event)
    return events
