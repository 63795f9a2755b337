"""Event Payload 子类型

所有领域事件的结构化 payload 定义。
"""

from pydantic import BaseModel, Field


class TaskCreatedPayload(BaseModel):
    """TASK_CREATED 事件 payload"""

    task_id: int
    creator: str
    title: str
    reward_points: int
    # 附带 description 以便从事件重建 tasks 表
    description: str = Field(default="")


class TaskAssignedPayload(BaseModel):
    """TASK_ASSIGNED 事件 payload"""

    task_id: int
    assignee: str


class TaskCompletedPayload(BaseModel):
    """TASK_COMPLETED 事件 payload"""

    task_id: int
    assignee: str
    points_awarded: int


class TaskCancelledPayload(BaseModel):
    """TASK_CANCELLED 事件 payload"""

    task_id: int
    cancelled_by: str


class UserLeveledUpPayload(BaseModel):
    """USER_LEVELED_UP 事件 payload"""

    user: str
    new_level: int
    profile_id: str = Field(default="", description="触发升级的进度记录")
