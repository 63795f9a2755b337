"""Store Protocol 接口定义

定义各 Store 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from typing import Protocol

from ..models.enums import TaskStatus
from ..models.event import Event
from ..models.progress import UserProgress
from ..models.task import Task


class TaskStore(Protocol):
    """Task 注册表存储接口"""

    async def get_task_count(self) -> int:
        """下一个待分配的 task_id"""
        ...

    async def insert_task(self, task: Task) -> None:
        """分配并插入任务（task_id 必须等于当前 count）"""
        ...

    async def update_task(self, task: Task) -> None:
        """写回任务的可变字段"""
        ...

    async def get_task(self, task_id: int) -> Task | None:
        """根据 task_id 查询任务"""
        ...

    async def list_tasks(self, status: TaskStatus | None = None) -> list[Task]:
        """查询任务列表，支持按状态筛选"""
        ...


class ProgressStore(Protocol):
    """UserProgress 存储接口"""

    async def create_progress(self, progress: UserProgress) -> None:
        """创建进度记录"""
        ...

    async def update_progress(self, progress: UserProgress) -> None:
        """写回累计字段"""
        ...

    async def get_progress(self, profile_id: str) -> UserProgress | None:
        """根据 profile_id 查询进度记录"""
        ...


class EventStore(Protocol):
    """Event 存储接口

    事件表 append-only：只允许插入，不允许更新或删除。
    """

    async def append_event(self, event: Event) -> None:
        """追加事件（append-only）"""
        ...

    async def get_next_seq(self) -> int:
        """获取下一个全局 seq（MAX+1）"""
        ...

    async def get_events_for_task(self, task_id: int) -> list[Event]:
        """查询指定任务的所有事件"""
        ...

    async def get_events_after(self, after_seq: int = 0) -> list[Event]:
        """查询指定 seq 之后的增量事件"""
        ...


class CapabilityStore(Protocol):
    """管理员凭证存储接口"""

    async def save_admin_hash(self, token_hash: str, holder: str, minted_at: str) -> None:
        """保存管理员凭证 hash"""
        ...

    async def get_admin_hash(self) -> str | None:
        """读取管理员凭证 hash"""
        ...
