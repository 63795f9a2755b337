"""Event Domain Model

事件表 append-only，不允许更新或删除。
event_id 使用 ULID 格式，seq 全局严格单调递增。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .enums import EventType


class EventDraft(BaseModel):
    """尚未落盘的事件（由纯状态流转函数产出）

    seq / event_id / ts 在提交事务时分配，失败路径不会产生任何草稿。
    """

    type: EventType
    task_id: int | None = None
    actor: str
    payload: dict[str, Any] = Field(default_factory=dict)


class Event(BaseModel):
    """Event 数据模型"""

    event_id: str = Field(description="唯一标识，ULID 格式，时间有序")
    seq: int = Field(ge=1, description="全局序号，严格单调递增")
    ts: datetime = Field(description="事件时间戳")
    type: EventType = Field(description="事件类型")
    task_id: int | None = Field(default=None, description="关联的 Task ID")
    actor: str = Field(description="触发事件的调用者身份")
    payload: dict[str, Any] = Field(default_factory=dict, description="结构化 payload")
