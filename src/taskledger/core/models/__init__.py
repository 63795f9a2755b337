"""TaskLedger Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    EventType,
    TaskStatus,
    validate_transition,
)
from .event import Event, EventDraft
from .payloads import (
    TaskAssignedPayload,
    TaskCancelledPayload,
    TaskCompletedPayload,
    TaskCreatedPayload,
    UserLeveledUpPayload,
)
from .progress import UserProgress
from .task import Task

__all__ = [
    # 枚举
    "TaskStatus",
    "EventType",
    # 状态机
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "validate_transition",
    # 聚合
    "Task",
    "UserProgress",
    # Event
    "Event",
    "EventDraft",
    # Payloads
    "TaskCreatedPayload",
    "TaskAssignedPayload",
    "TaskCompletedPayload",
    "TaskCancelledPayload",
    "UserLeveledUpPayload",
]
