"""Task Domain Model

title / description / reward_points / creator 创建后不可变；
assignee 最多设置一次；status 单调推进，终态后不再变化。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..config import MAX_POINTS
from .enums import TaskStatus


class Task(BaseModel):
    """Task 数据模型

    任务从不删除，终态任务作为历史记录保留在注册表中。
    """

    task_id: int = Field(ge=0, description="稠密、从 0 开始的单调递增编号")
    title: str = Field(description="任务标题，允许为空")
    description: str = Field(default="", description="任务描述，允许为空")
    reward_points: int = Field(gt=0, le=MAX_POINTS, description="完成奖励积分")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="当前状态")
    creator: str = Field(description="创建者身份")
    assignee: str | None = Field(default=None, description="执行者身份，未指派时为 None")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    @property
    def is_available(self) -> bool:
        """任务是否仍可被指派（PENDING 且尚未指派）"""
        return self.status == TaskStatus.PENDING and self.assignee is None
