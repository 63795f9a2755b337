"""等级计算

level 是 points_earned 的纯函数；points_earned 只增不减，因此 level 单调不减。
"""

from .config import MAX_LEVEL, POINTS_PER_LEVEL


def compute_level(points_earned: int) -> int:
    """根据累计积分计算等级：min(MAX_LEVEL, points_earned // POINTS_PER_LEVEL)"""
    return min(MAX_LEVEL, points_earned // POINTS_PER_LEVEL)
