"""EventStore SQLite 实现

事件表 append-only：只允许插入，不允许更新或删除。
seq 全局严格单调递增。
"""

import json
from datetime import datetime

import aiosqlite

from ..models.enums import EventType
from ..models.event import Event


class SqliteEventStore:
    """EventStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def append_event(self, event: Event) -> None:
        """追加事件（append-only）

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            """
            INSERT INTO events (seq, event_id, ts, type, task_id, actor, payload)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event.seq,
                event.event_id,
                event.ts.isoformat(),
                event.type.value,
                event.task_id,
                event.actor,
                json.dumps(event.payload, ensure_ascii=False),
            ),
        )

    async def get_next_seq(self) -> int:
        """获取下一个全局 seq（MAX+1）

        在事务内调用以确保原子性。
        """
        cursor = await self._conn.execute("SELECT COALESCE(MAX(seq), 0) FROM events")
        row = await cursor.fetchone()
        return (row[0] if row else 0) + 1

    async def get_events_for_task(self, task_id: int) -> list[Event]:
        """查询指定任务的所有事件，按 seq 正序"""
        cursor = await self._conn.execute(
            "SELECT * FROM events WHERE task_id = ? ORDER BY seq ASC",
            (task_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_event(row) for row in rows]

    async def get_events_after(self, after_seq: int = 0) -> list[Event]:
        """查询指定 seq 之后的增量事件（供外部订阅者拉取）"""
        cursor = await self._conn.execute(
            "SELECT * FROM events WHERE seq > ? ORDER BY seq ASC",
            (after_seq,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_event(row) for row in rows]

    async def get_all_events(self) -> list[Event]:
        """查询所有事件，按 seq 排序（用于 Projection 重建）"""
        return await self.get_events_after(0)

    @staticmethod
    def _row_to_event(row: aiosqlite.Row) -> Event:
        """将数据库行转换为 Event 模型"""
        payload = json.loads(row[6]) if row[6] else {}
        return Event(
            seq=row[0],
            event_id=row[1],
            ts=datetime.fromisoformat(row[2]),
            type=EventType(row[3]),
            task_id=row[4],
            actor=row[5],
            payload=payload,
        )
