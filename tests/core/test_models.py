"""Domain Models 单元测试

测试内容：
1. 状态数值编码（对外契约）
2. 事件类型枚举
3. Pydantic 模型校验
"""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError
from taskledger.core.config import MAX_POINTS
from taskledger.core.models import (
    EventType,
    Task,
    TaskCompletedPayload,
    TaskCreatedPayload,
    TaskStatus,
    UserProgress,
)


class TestEnums:
    """枚举测试"""

    def test_task_status_numeric_codes(self):
        """状态数值编码必须保持 0/1/2"""
        assert TaskStatus.PENDING == 0
        assert TaskStatus.COMPLETED == 1
        assert TaskStatus.CANCELLED == 2

    def test_task_status_from_code(self):
        assert TaskStatus(0) is TaskStatus.PENDING
        assert TaskStatus(2) is TaskStatus.CANCELLED
        with pytest.raises(ValueError):
            TaskStatus(3)

    def test_event_type_values(self):
        assert EventType.TASK_CREATED == "TASK_CREATED"
        assert EventType.TASK_ASSIGNED == "TASK_ASSIGNED"
        assert EventType.TASK_COMPLETED == "TASK_COMPLETED"
        assert EventType.TASK_CANCELLED == "TASK_CANCELLED"
        assert EventType.USER_LEVELED_UP == "USER_LEVELED_UP"


class TestTaskModel:
    """Task 模型校验"""

    def _task(self, **overrides) -> Task:
        now = datetime.now(UTC)
        data = {
            "task_id": 0,
            "title": "Write docs",
            "reward_points": 10,
            "creator": "alice",
            "created_at": now,
            "updated_at": now,
        }
        data.update(overrides)
        return Task(**data)

    def test_defaults(self):
        task = self._task()
        assert task.status == TaskStatus.PENDING
        assert task.assignee is None
        assert task.description == ""
        assert task.is_available is True

    def test_assigned_task_not_available(self):
        assert self._task(assignee="bob").is_available is False

    def test_terminal_task_not_available(self):
        assert self._task(status=TaskStatus.CANCELLED).is_available is False

    def test_reward_points_must_be_positive(self):
        with pytest.raises(ValidationError):
            self._task(reward_points=0)

    def test_reward_points_fit_sqlite_integer(self):
        assert self._task(reward_points=MAX_POINTS).reward_points == MAX_POINTS
        with pytest.raises(ValidationError):
            self._task(reward_points=MAX_POINTS + 1)

    def test_task_id_non_negative(self):
        with pytest.raises(ValidationError):
            self._task(task_id=-1)


class TestUserProgressModel:
    def test_defaults(self):
        now = datetime.now(UTC)
        progress = UserProgress(profile_id="p1", owner="bob", created_at=now, updated_at=now)
        assert progress.tasks_completed == 0
        assert progress.points_earned == 0
        assert progress.level == 0

    def test_level_upper_bound(self):
        now = datetime.now(UTC)
        with pytest.raises(ValidationError):
            UserProgress(
                profile_id="p1", owner="bob", level=256, created_at=now, updated_at=now
            )

    def test_points_upper_bound(self):
        now = datetime.now(UTC)
        with pytest.raises(ValidationError):
            UserProgress(
                profile_id="p1",
                owner="bob",
                points_earned=MAX_POINTS + 1,
                level=255,
                created_at=now,
                updated_at=now,
            )


class TestPayloads:
    def test_task_created_payload(self):
        payload = TaskCreatedPayload(task_id=3, creator="alice", title="t", reward_points=5)
        assert payload.model_dump() == {
            "task_id": 3,
            "creator": "alice",
            "title": "t",
            "reward_points": 5,
            "description": "",
        }

    def test_task_completed_payload(self):
        payload = TaskCompletedPayload(task_id=1, assignee="bob", points_awarded=50)
        assert payload.points_awarded == 50
