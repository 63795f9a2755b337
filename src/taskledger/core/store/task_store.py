"""TaskStore SQLite 实现

tasks 表 + registry 计数器。
分配 task_id 与插入任务在同一事务内完成，保证 0..count-1 稠密无空洞。
此处的方法均不提交事务，由调用方管理。
"""

from datetime import datetime

import aiosqlite

from ..models.enums import TaskStatus
from ..models.task import Task


class TaskIdAllocationError(RuntimeError):
    """待插入任务的 task_id 与注册表计数器不一致"""


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def get_task_count(self) -> int:
        """下一个待分配的 task_id（即历史创建任务总数）"""
        cursor = await self._conn.execute(
            "SELECT task_count FROM registry WHERE id = 1"
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def insert_task(self, task: Task) -> None:
        """分配并插入：task.task_id 必须等于当前 count，插入后 count + 1"""
        count = await self.get_task_count()
        if task.task_id != count:
            raise TaskIdAllocationError(
                f"task_id {task.task_id} does not match registry count {count}"
            )
        await self._conn.execute(
            """
            INSERT INTO tasks (task_id, title, description, reward_points, status,
                               creator, assignee, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.task_id,
                task.title,
                task.description,
                task.reward_points,
                int(task.status),
                task.creator,
                task.assignee,
                task.created_at.isoformat(),
                task.updated_at.isoformat(),
            ),
        )
        await self._conn.execute(
            "UPDATE registry SET task_count = ? WHERE id = 1",
            (count + 1,),
        )

    async def update_task(self, task: Task) -> None:
        """写回可变字段（status / assignee / updated_at）"""
        await self._conn.execute(
            """
            UPDATE tasks
            SET status = ?, assignee = ?, updated_at = ?
            WHERE task_id = ?
            """,
            (
                int(task.status),
                task.assignee,
                task.updated_at.isoformat(),
                task.task_id,
            ),
        )

    async def get_task(self, task_id: int) -> Task | None:
        """根据 task_id 查询任务"""
        cursor = await self._conn.execute(
            "SELECT * FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def list_tasks(self, status: TaskStatus | None = None) -> list[Task]:
        """查询任务列表，支持按状态筛选，按 task_id 正序"""
        if status is not None:
            cursor = await self._conn.execute(
                "SELECT * FROM tasks WHERE status = ? ORDER BY task_id ASC",
                (int(status),),
            )
        else:
            cursor = await self._conn.execute(
                "SELECT * FROM tasks ORDER BY task_id ASC"
            )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def reset(self) -> None:
        """清空 tasks 表与计数器（仅用于 projection 重建）"""
        await self._conn.execute("DELETE FROM tasks")
        await self._conn.execute("UPDATE registry SET task_count = 0 WHERE id = 1")

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            task_id=row[0],
            title=row[1],
            description=row[2],
            reward_points=row[3],
            status=TaskStatus(row[4]),
            creator=row[5],
            assignee=row[6],
            created_at=datetime.fromisoformat(row[7]),
            updated_at=datetime.fromisoformat(row[8]),
        )
