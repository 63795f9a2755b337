"""端到端集成测试

创建 -> 指派 -> 完成 -> 升级 全链路，以及取消、重建后状态一致。
"""

from httpx import AsyncClient
from taskledger.core.projection import rebuild_all


async def _create_and_assign(
    client: AsyncClient, reward: int, assignee: str = "bob"
) -> int:
    resp = await client.post(
        "/api/tasks",
        json={"title": f"reward {reward}", "reward_points": reward},
        headers={"X-Caller-Id": "alice"},
    )
    task_id = resp.json()["task_id"]
    resp = await client.post(
        f"/api/tasks/{task_id}/assign",
        json={"assignee": assignee},
        headers={"X-Caller-Id": "alice"},
    )
    assert resp.status_code == 200
    return task_id


async def _complete(client: AsyncClient, task_id: int, profile_id: str, caller: str = "bob"):
    resp = await client.post(
        f"/api/tasks/{task_id}/complete",
        json={"profile_id": profile_id},
        headers={"X-Caller-Id": caller},
    )
    assert resp.status_code == 200
    return [e["type"] for e in resp.json()["events"]]


class TestLevelUpFlow:
    async def test_two_half_brackets_level_up_once(self, client: AsyncClient):
        profile = (await client.post("/api/profiles", headers={"X-Caller-Id": "bob"})).json()
        pid = profile["profile_id"]

        first = await _create_and_assign(client, 50)
        second = await _create_and_assign(client, 50)

        assert await _complete(client, first, pid) == ["TASK_COMPLETED"]
        resp = await client.get(f"/api/profiles/{pid}")
        assert resp.json()["points_earned"] == 50
        assert resp.json()["level"] == 0

        assert await _complete(client, second, pid) == ["TASK_COMPLETED", "USER_LEVELED_UP"]
        resp = await client.get(f"/api/profiles/{pid}")
        data = resp.json()
        assert data["tasks_completed"] == 2
        assert data["points_earned"] == 100
        assert data["level"] == 1

        events = (await client.get("/api/events")).json()["events"]
        level_ups = [e for e in events if e["type"] == "USER_LEVELED_UP"]
        assert len(level_ups) == 1
        assert level_ups[0]["payload"]["user"] == "bob"
        assert level_ups[0]["payload"]["new_level"] == 1

    async def test_large_reward_jumps_brackets(self, client: AsyncClient):
        profile = (await client.post("/api/profiles", headers={"X-Caller-Id": "bob"})).json()
        task_id = await _create_and_assign(client, 250)

        assert await _complete(client, task_id, profile["profile_id"]) == [
            "TASK_COMPLETED",
            "USER_LEVELED_UP",
        ]
        resp = await client.get(f"/api/profiles/{profile['profile_id']}/level")
        assert resp.json()["level"] == 2


class TestCancelAndRebuild:
    async def test_cancelled_task_cannot_be_completed(
        self, client: AsyncClient, integration_app
    ):
        profile = (await client.post("/api/profiles", headers={"X-Caller-Id": "bob"})).json()
        task_id = await _create_and_assign(client, 30)

        resp = await client.post(
            f"/api/tasks/{task_id}/cancel",
            headers={
                "X-Caller-Id": "admin",
                "X-Admin-Token": integration_app.state.admin_token,
            },
        )
        assert resp.status_code == 200

        resp = await client.post(
            f"/api/tasks/{task_id}/complete",
            json={"profile_id": profile["profile_id"]},
            headers={"X-Caller-Id": "bob"},
        )
        assert resp.status_code == 409
        resp = await client.get(f"/api/profiles/{profile['profile_id']}")
        assert resp.json()["points_earned"] == 0

    async def test_rebuild_preserves_api_view(self, client: AsyncClient, integration_app):
        profile = (await client.post("/api/profiles", headers={"X-Caller-Id": "bob"})).json()
        done = await _create_and_assign(client, 100)
        await _complete(client, done, profile["profile_id"])
        await _create_and_assign(client, 20, assignee="carol")

        before = (await client.get("/api/tasks")).json()

        sg = integration_app.state.store_group
        await rebuild_all(sg.conn, sg.event_store, sg.task_store, sg.write_lock)

        after = (await client.get("/api/tasks")).json()
        assert after == before
        assert (await client.get("/api/tasks/count")).json() == {"count": 2}
