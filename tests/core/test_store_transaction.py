"""事务一致性单元测试

测试内容：
1. 任务 + 事件在同一事务内原子落盘
2. 回滚验证（事务失败时任务、计数器、事件都不写入）
3. task_id 稠密分配
4. 并发写操作串行化
"""

import asyncio
from datetime import UTC, datetime

import pytest
from taskledger.core import lifecycle
from taskledger.core.ledger import TaskLedger
from taskledger.core.models import EventType, Task, TaskStatus
from taskledger.core.store import (
    StoreGroup,
    TaskIdAllocationError,
    apply_transition,
    ledger_transaction,
)

NOW = datetime(2024, 1, 1, tzinfo=UTC)


def _make_task(task_id: int) -> Task:
    return Task(
        task_id=task_id,
        title=f"task-{task_id}",
        reward_points=10,
        status=TaskStatus.PENDING,
        creator="alice",
        created_at=NOW,
        updated_at=NOW,
    )


async def _apply(store_group: StoreGroup, transition: lifecycle.Transition):
    return await apply_transition(
        store_group.task_store,
        store_group.progress_store,
        store_group.event_store,
        transition,
        NOW,
    )


class TestTransactionAtomicity:
    """事务一致性测试"""

    async def test_task_and_event_committed_together(self, store_group: StoreGroup):
        transition = lifecycle.create_task(0, "t", "", 10, "alice", NOW)
        async with ledger_transaction(store_group.conn):
            events = await _apply(store_group, transition)

        assert await store_group.task_store.get_task_count() == 1
        assert (await store_group.task_store.get_task(0)).title == "t"
        stored = await store_group.event_store.get_events_for_task(0)
        assert [e.event_id for e in stored] == [e.event_id for e in events]
        assert stored[0].type == EventType.TASK_CREATED
        assert len(stored[0].event_id) == 26

    async def test_rollback_on_failure(self, store_group: StoreGroup):
        transition = lifecycle.create_task(0, "t", "", 10, "alice", NOW)
        with pytest.raises(RuntimeError, match="boom"):
            async with ledger_transaction(store_group.conn):
                await _apply(store_group, transition)
                raise RuntimeError("boom")

        assert await store_group.task_store.get_task_count() == 0
        assert await store_group.task_store.get_task(0) is None
        assert await store_group.event_store.get_all_events() == []

    async def test_connection_usable_after_rollback(self, store_group: StoreGroup):
        with pytest.raises(RuntimeError):
            async with ledger_transaction(store_group.conn):
                raise RuntimeError("boom")

        transition = lifecycle.create_task(0, "t", "", 10, "alice", NOW)
        async with ledger_transaction(store_group.conn):
            await _apply(store_group, transition)
        assert await store_group.task_store.get_task_count() == 1


class TestTaskIdAllocation:
    """注册表计数器"""

    async def test_insert_must_match_count(self, store_group: StoreGroup):
        with pytest.raises(TaskIdAllocationError):
            async with ledger_transaction(store_group.conn):
                await store_group.task_store.insert_task(_make_task(1))
        assert await store_group.task_store.get_task_count() == 0

    async def test_sequential_inserts_are_dense(self, store_group: StoreGroup):
        async with ledger_transaction(store_group.conn):
            for task_id in range(3):
                await store_group.task_store.insert_task(_make_task(task_id))

        assert await store_group.task_store.get_task_count() == 3
        tasks = await store_group.task_store.list_tasks()
        assert [t.task_id for t in tasks] == [0, 1, 2]

    async def test_concurrent_creates_get_distinct_dense_ids(self, ledger: TaskLedger):
        results = await asyncio.gather(
            *(ledger.create_task(f"t{i}", "", 5, f"user-{i}") for i in range(10))
        )

        ids = sorted(task_id for task_id, _ in results)
        assert ids == list(range(10))
        assert await ledger.task_count() == 10
        seqs = sorted(events[0].seq for _, events in results)
        assert seqs == list(range(1, 11))


class TestEventSeq:
    """全局 seq 单调递增"""

    async def test_next_seq_starts_at_one(self, store_group: StoreGroup):
        assert await store_group.event_store.get_next_seq() == 1

    async def test_seq_continues_across_transactions(self, store_group: StoreGroup):
        async with ledger_transaction(store_group.conn):
            await _apply(store_group, lifecycle.create_task(0, "t", "", 100, "alice", NOW))
        async with ledger_transaction(store_group.conn):
            task = await store_group.task_store.get_task(0)
            await _apply(store_group, lifecycle.assign_task(task, 0, "bob", "alice", NOW))

        events = await store_group.event_store.get_all_events()
        assert [e.seq for e in events] == [1, 2]
        assert [e.seq for e in await store_group.event_store.get_events_after(1)] == [2]
