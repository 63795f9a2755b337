"""TaskLedger -- 生命周期操作编排层

流程（每个写操作）：
1. 获取注册表写锁，开启写事务
2. 读取相关聚合，交给 lifecycle 纯函数校验并计算新状态
3. 在同一事务内落盘新状态并追加事件
4. 任一前置条件失败则整体回滚，异常原样抛给调用方

查询接口不加锁，也不开启写事务。
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from ulid import ULID

from . import lifecycle
from .capability import (
    AdminCapability,
    hash_token,
    mint_admin_capability,
    redeem_admin_token,
    verify_admin_capability,
)
from .config import NO_IDENTITY
from .errors import (
    ProfileNotFoundError,
    SystemAlreadyInitializedError,
    TaskLedgerError,
)
from .models import Event, Task, TaskStatus, UserProgress
from .store import StoreGroup, apply_transition, ledger_transaction

log = structlog.get_logger()

# 对外可查询的字段
TASK_FIELDS = ("title", "description", "reward_points", "status", "creator", "assignee")
PROGRESS_FIELDS = ("tasks_completed", "points_earned", "level", "owner")


class TaskLedger:
    """任务账本服务

    所有操作显式接收 StoreGroup（注册表句柄），不依赖任何全局状态。
    """

    def __init__(self, store_group: StoreGroup) -> None:
        self._stores = store_group

    # ------------------------------------------------------------------
    # 系统初始化 / 管理员凭证
    # ------------------------------------------------------------------

    async def initialize_admin(self, holder: str) -> tuple[AdminCapability, str]:
        """铸造唯一的管理员凭证并交给初始化者

        Returns:
            (capability, token) -- token 只在此处以明文出现一次

        Raises:
            SystemAlreadyInitializedError: 凭证已铸造过
        """
        stores = self._stores
        async with stores.write_lock:
            async with ledger_transaction(stores.conn):
                if await stores.capability_store.get_admin_hash() is not None:
                    raise SystemAlreadyInitializedError()
                capability, token = mint_admin_capability()
                await stores.capability_store.save_admin_hash(
                    token_hash=hash_token(token),
                    holder=holder,
                    minted_at=datetime.now(UTC).isoformat(),
                )
        log.info("admin_capability_minted", holder=holder)
        return capability, token

    async def authenticate_admin(self, token: str) -> AdminCapability:
        """出示 token 兑换管理员凭证（边界处调用）

        Raises:
            InvalidCapabilityError: token 无效或系统未初始化
        """
        async with self._read() as stores:
            expected_hash = await stores.capability_store.get_admin_hash()
        return redeem_admin_token(token, expected_hash)

    # ------------------------------------------------------------------
    # 生命周期操作
    # ------------------------------------------------------------------

    async def create_task(
        self,
        title: str,
        description: str,
        reward_points: int,
        caller: str,
    ) -> tuple[int, list[Event]]:
        """创建任务（任何人都可以创建）

        Returns:
            (task_id, events)

        Raises:
            InvalidRewardPointsError: reward_points 不是正数
        """
        stores = self._stores
        async with self._guard("create_task", caller=caller):
            now = datetime.now(UTC)
            task_id = await stores.task_store.get_task_count()
            transition = lifecycle.create_task(
                task_id, title, description, reward_points, caller, now
            )
            events = await apply_transition(
                stores.task_store,
                stores.progress_store,
                stores.event_store,
                transition,
                now,
            )
        log.info(
            "task_created",
            task_id=task_id,
            creator=caller,
            reward_points=reward_points,
        )
        return task_id, events

    async def assign_task(self, task_id: int, assignee: str, caller: str) -> list[Event]:
        """指派任务（仅创建者）

        Raises:
            TaskNotFoundError / TaskNotPendingError /
            TaskAlreadyAssignedError / NotCreatorError
        """
        stores = self._stores
        async with self._guard("assign_task", caller=caller, task_id=task_id):
            now = datetime.now(UTC)
            task = await stores.task_store.get_task(task_id)
            transition = lifecycle.assign_task(task, task_id, assignee, caller, now)
            events = await apply_transition(
                stores.task_store,
                stores.progress_store,
                stores.event_store,
                transition,
                now,
            )
        log.info("task_assigned", task_id=task_id, assignee=assignee)
        return events

    async def complete_task(
        self,
        task_id: int,
        profile_id: str,
        caller: str,
    ) -> list[Event]:
        """完成任务（仅执行者，且需出示本人的进度记录）

        Raises:
            ProfileNotFoundError / ProfileMismatchError / TaskNotFoundError /
            TaskNotPendingError / NotAssigneeError / PointsOverflowError
        """
        stores = self._stores
        async with self._guard("complete_task", caller=caller, task_id=task_id):
            now = datetime.now(UTC)
            progress = await stores.progress_store.get_progress(profile_id)
            if progress is None:
                raise ProfileNotFoundError(profile_id)
            task = await stores.task_store.get_task(task_id)
            transition = lifecycle.complete_task(task, task_id, progress, caller, now)
            events = await apply_transition(
                stores.task_store,
                stores.progress_store,
                stores.event_store,
                transition,
                now,
            )

        awarded = transition.task.reward_points
        log.info(
            "task_completed",
            task_id=task_id,
            assignee=caller,
            points_awarded=awarded,
        )
        if transition.progress is not None and transition.progress.level > progress.level:
            log.info(
                "user_leveled_up",
                user=caller,
                profile_id=profile_id,
                new_level=transition.progress.level,
            )
        return events

    async def cancel_task(
        self,
        capability: AdminCapability,
        task_id: int,
        caller: str,
    ) -> list[Event]:
        """取消任务（需出示管理员凭证；是否已指派不影响取消）

        Raises:
            InvalidCapabilityError / TaskNotFoundError / TaskNotPendingError
        """
        stores = self._stores
        async with self._guard("cancel_task", caller=caller, task_id=task_id):
            verify_admin_capability(
                capability, await stores.capability_store.get_admin_hash()
            )
            now = datetime.now(UTC)
            task = await stores.task_store.get_task(task_id)
            transition = lifecycle.cancel_task(task, task_id, caller, now)
            events = await apply_transition(
                stores.task_store,
                stores.progress_store,
                stores.event_store,
                transition,
                now,
            )
        log.info("task_cancelled", task_id=task_id, cancelled_by=caller)
        return events

    async def create_profile(self, caller: str) -> UserProgress:
        """为调用者创建进度记录

        不做唯一性约束：同一身份重复调用会得到多条独立记录。
        """
        stores = self._stores
        now = datetime.now(UTC)
        progress = UserProgress(
            profile_id=str(ULID()),
            owner=caller,
            created_at=now,
            updated_at=now,
        )
        async with stores.write_lock:
            async with ledger_transaction(stores.conn):
                await stores.progress_store.create_progress(progress)
        log.info("profile_created", profile_id=progress.profile_id, owner=caller)
        return progress

    # ------------------------------------------------------------------
    # 查询接口
    #
    # 读写共用同一连接：写事务未提交的数据在该连接上可见，
    # 因此查询同样持有 write_lock，只能观察到已提交的完整状态。
    # ------------------------------------------------------------------

    async def task_count(self) -> int:
        """历史创建任务总数（即下一个 task_id）"""
        async with self._read() as stores:
            return await stores.task_store.get_task_count()

    async def task_exists(self, task_id: int) -> bool:
        async with self._read() as stores:
            return await stores.task_store.get_task(task_id) is not None

    async def get_task(self, task_id: int) -> Task:
        """查询任务详情

        Raises:
            TaskNotFoundError: 任务不存在
        """
        async with self._read() as stores:
            task = await stores.task_store.get_task(task_id)
        return lifecycle.require_task(task, task_id)

    async def get_task_with_events(self, task_id: int) -> tuple[Task, list[Event]]:
        """在同一次读取中查询任务及其事件历史

        Raises:
            TaskNotFoundError: 任务不存在
        """
        async with self._read() as stores:
            task = await stores.task_store.get_task(task_id)
            events = await stores.event_store.get_events_for_task(task_id)
        return lifecycle.require_task(task, task_id), events

    async def is_task_available(self, task_id: int) -> bool:
        """任务是否可被指派（PENDING 且未指派）"""
        task = await self.get_task(task_id)
        return task.is_available

    async def get_task_field(self, task_id: int, field: str) -> Any:
        """单字段查询，输出对外编码

        status 输出数值编码；assignee 未设置时输出 NO_IDENTITY 哨兵值。
        """
        if field not in TASK_FIELDS:
            raise ValueError(f"Unknown task field: {field}")
        task = await self.get_task(task_id)
        if field == "status":
            return int(task.status)
        if field == "assignee":
            return task.assignee if task.assignee is not None else NO_IDENTITY
        return getattr(task, field)

    async def list_tasks(self, status: TaskStatus | None = None) -> list[Task]:
        """查询任务列表"""
        async with self._read() as stores:
            return await stores.task_store.list_tasks(status)

    async def get_progress(self, profile_id: str) -> UserProgress:
        """查询进度记录

        Raises:
            ProfileNotFoundError: 记录不存在
        """
        async with self._read() as stores:
            progress = await stores.progress_store.get_progress(profile_id)
        if progress is None:
            raise ProfileNotFoundError(profile_id)
        return progress

    async def get_progress_field(self, profile_id: str, field: str) -> Any:
        """进度记录单字段查询"""
        if field not in PROGRESS_FIELDS:
            raise ValueError(f"Unknown progress field: {field}")
        progress = await self.get_progress(profile_id)
        return getattr(progress, field)

    async def list_profiles(self, owner: str) -> list[UserProgress]:
        """查询某身份名下的进度记录"""
        async with self._read() as stores:
            return await stores.progress_store.list_progress_for_owner(owner)

    async def get_events_for_task(self, task_id: int) -> list[Event]:
        """查询任务的事件历史

        Raises:
            TaskNotFoundError: 任务不存在
        """
        _, events = await self.get_task_with_events(task_id)
        return events

    async def list_events(self, after_seq: int = 0) -> list[Event]:
        """查询 after_seq 之后的全部事件"""
        async with self._read() as stores:
            return await stores.event_store.get_events_after(after_seq)

    # ------------------------------------------------------------------
    # 内部工具
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _read(self) -> AsyncIterator[StoreGroup]:
        """持有 write_lock 读取，不与进行中的写事务交错"""
        async with self._stores.write_lock:
            yield self._stores

    @asynccontextmanager
    async def _guard(self, operation: str, **context: Any) -> AsyncIterator[None]:
        """写锁 + 写事务；领域异常记录一条日志后原样抛出"""
        stores = self._stores
        try:
            async with stores.write_lock:
                async with ledger_transaction(stores.conn):
                    yield
        except TaskLedgerError as exc:
            log.info(
                "lifecycle_rejected",
                operation=operation,
                code=exc.code,
                **context,
            )
            raise
