"""UserProgress Domain Model

每个身份的累计进度：完成任务数、累计积分、派生等级。
level 永远等于 min(MAX_LEVEL, points_earned // POINTS_PER_LEVEL)。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..config import MAX_LEVEL, MAX_POINTS


class UserProgress(BaseModel):
    """UserProgress 数据模型

    同一身份可以拥有多条记录（创建不做唯一性约束），
    因此以 profile_id 而不是 owner 作为主键。
    """

    profile_id: str = Field(description="唯一标识，ULID 格式")
    owner: str = Field(description="记录所属身份，创建后不可变")
    tasks_completed: int = Field(default=0, ge=0, description="已完成任务数")
    points_earned: int = Field(default=0, ge=0, le=MAX_POINTS, description="累计积分")
    level: int = Field(default=0, ge=0, le=MAX_LEVEL, description="派生等级")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
