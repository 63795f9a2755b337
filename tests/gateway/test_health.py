"""健康检查测试"""

from httpx import AsyncClient


class TestHealth:
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_ready_before_initialization(self, client: AsyncClient):
        resp = await client.get("/ready")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ready"
        assert data["checks"]["sqlite"] == "ok"
        assert data["checks"]["sqlite_wal"] == "ok"
        assert data["checks"]["admin_capability"] == "not_minted"

    async def test_ready_after_initialization(self, client: AsyncClient, admin_token: str):
        resp = await client.get("/ready")
        assert resp.json()["checks"]["admin_capability"] == "minted"

    async def test_ready_with_closed_connection(self, client: AsyncClient, test_app):
        await test_app.state.store_group.conn.close()
        resp = await client.get("/ready")
        assert resp.status_code == 503
        assert resp.json()["status"] == "not_ready"
