"""集成测试共享 fixture"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskledger.core.ledger import TaskLedger
from taskledger.core.store import create_store_group


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path):
    """集成测试用 FastAPI app（已完成系统初始化）"""
    db_path = str(tmp_path / "test.db")
    os.environ["TASKLEDGER_DB_PATH"] = db_path
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from taskledger.gateway.main import create_app

    app = create_app()

    store_group = await create_store_group(db_path)
    app.state.store_group = store_group
    _, app.state.admin_token = await TaskLedger(store_group).initialize_admin("admin")

    yield app

    await store_group.conn.close()
    os.environ.pop("TASKLEDGER_DB_PATH", None)
    os.environ.pop("LOGFIRE_SEND_TO_LOGFIRE", None)


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac
