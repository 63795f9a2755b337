"""ProgressStore SQLite 实现

user_progress 表；每条记录只由 complete_task 修改，从不删除。
"""

from datetime import datetime

import aiosqlite

from ..models.progress import UserProgress


class SqliteProgressStore:
    """ProgressStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_progress(self, progress: UserProgress) -> None:
        """创建进度记录"""
        await self._conn.execute(
            """
            INSERT INTO user_progress (profile_id, owner, tasks_completed,
                                       points_earned, level, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                progress.profile_id,
                progress.owner,
                progress.tasks_completed,
                progress.points_earned,
                progress.level,
                progress.created_at.isoformat(),
                progress.updated_at.isoformat(),
            ),
        )

    async def update_progress(self, progress: UserProgress) -> None:
        """写回累计字段"""
        await self._conn.execute(
            """
            UPDATE user_progress
            SET tasks_completed = ?, points_earned = ?, level = ?, updated_at = ?
            WHERE profile_id = ?
            """,
            (
                progress.tasks_completed,
                progress.points_earned,
                progress.level,
                progress.updated_at.isoformat(),
                progress.profile_id,
            ),
        )

    async def get_progress(self, profile_id: str) -> UserProgress | None:
        """根据 profile_id 查询进度记录"""
        cursor = await self._conn.execute(
            "SELECT * FROM user_progress WHERE profile_id = ?",
            (profile_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_progress(row)

    async def list_progress_for_owner(self, owner: str) -> list[UserProgress]:
        """查询某身份名下的全部进度记录（按创建时间正序）"""
        cursor = await self._conn.execute(
            "SELECT * FROM user_progress WHERE owner = ? ORDER BY created_at ASC",
            (owner,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_progress(row) for row in rows]

    @staticmethod
    def _row_to_progress(row: aiosqlite.Row) -> UserProgress:
        """将数据库行转换为 UserProgress 模型"""
        return UserProgress(
            profile_id=row[0],
            owner=row[1],
            tasks_completed=row[2],
            points_earned=row[3],
            level=row[4],
            created_at=datetime.fromisoformat(row[5]),
            updated_at=datetime.fromisoformat(row[6]),
        )
