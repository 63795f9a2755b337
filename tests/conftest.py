"""全局 pytest 配置 -- 临时 SQLite 账本 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from taskledger.core.capability import AdminCapability
from taskledger.core.ledger import TaskLedger
from taskledger.core.store import StoreGroup, create_store_group


@pytest_asyncio.fixture
async def store_group(tmp_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """提供已初始化的临时数据库 Store 实例组"""
    sg = await create_store_group(str(tmp_path / "sqlite" / "test.db"))
    yield sg
    await sg.conn.close()


@pytest_asyncio.fixture
async def ledger(store_group: StoreGroup) -> TaskLedger:
    """提供 TaskLedger 实例"""
    return TaskLedger(store_group)


@pytest_asyncio.fixture
async def admin(ledger: TaskLedger) -> tuple[AdminCapability, str]:
    """系统初始化：铸造管理员凭证交给 admin 身份"""
    return await ledger.initialize_admin("admin")


async def _snapshot(sg: StoreGroup) -> dict[str, list[tuple]]:
    """导出全部持久化状态"""
    tables = {
        "tasks": "SELECT * FROM tasks ORDER BY task_id",
        "registry": "SELECT * FROM registry",
        "user_progress": "SELECT * FROM user_progress ORDER BY profile_id",
        "events": "SELECT * FROM events ORDER BY seq",
        "capabilities": "SELECT * FROM capabilities",
    }
    result: dict[str, list[tuple]] = {}
    for name, sql in tables.items():
        cursor = await sg.conn.execute(sql)
        result[name] = [tuple(row) for row in await cursor.fetchall()]
    return result


@pytest_asyncio.fixture
async def take_snapshot(store_group: StoreGroup):
    """返回快照函数，用于验证失败操作对存储状态没有任何影响"""

    async def _take() -> dict[str, list[tuple]]:
        return await _snapshot(store_group)

    return _take
