"""TaskLedger Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

import asyncio
from pathlib import Path

import aiosqlite

from .capability_store import SqliteCapabilityStore
from .event_store import SqliteEventStore
from .progress_store import SqliteProgressStore
from .sqlite_init import init_db
from .task_store import SqliteTaskStore, TaskIdAllocationError
from .transaction import apply_transition, ledger_transaction


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接

    即注册表句柄：所有写操作通过 write_lock 串行化，
    保证同一连接上的事务不会交错。
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.write_lock = asyncio.Lock()
        self.task_store = SqliteTaskStore(conn)
        self.progress_store = SqliteProgressStore(conn)
        self.event_store = SqliteEventStore(conn)
        self.capability_store = SqliteCapabilityStore(conn)


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteTaskStore",
    "SqliteProgressStore",
    "SqliteEventStore",
    "SqliteCapabilityStore",
    "TaskIdAllocationError",
    "init_db",
    "apply_transition",
    "ledger_transaction",
]
