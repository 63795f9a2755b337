"""gateway 测试配置 -- FastAPI app + httpx AsyncClient"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskledger.core.ledger import TaskLedger
from taskledger.core.store import create_store_group


@pytest_asyncio.fixture
async def test_app(tmp_path: Path):
    """创建测试用 FastAPI app 实例"""
    db_path = str(tmp_path / "sqlite" / "test.db")
    os.environ["TASKLEDGER_DB_PATH"] = db_path
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from taskledger.gateway.main import create_app

    app = create_app()

    # 手动初始化（绕过 lifespan）
    store_group = await create_store_group(db_path)
    app.state.store_group = store_group

    yield app

    await store_group.conn.close()
    os.environ.pop("TASKLEDGER_DB_PATH", None)
    os.environ.pop("LOGFIRE_SEND_TO_LOGFIRE", None)


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_token(test_app) -> str:
    """系统初始化：铸造管理员凭证，返回明文 token"""
    _, token = await TaskLedger(test_app.state.store_group).initialize_admin("admin")
    return token
