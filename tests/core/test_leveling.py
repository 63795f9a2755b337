"""等级计算单元测试"""

import pytest
from taskledger.core.config import MAX_LEVEL
from taskledger.core.leveling import compute_level


@pytest.mark.parametrize(
    "points,level",
    [
        (0, 0),
        (99, 0),
        (100, 1),
        (199, 1),
        (250, 2),
        (25_499, 254),
        (25_500, 255),
        (10_000_000, 255),
    ],
)
def test_compute_level(points: int, level: int):
    assert compute_level(points) == level


def test_level_is_capped():
    assert compute_level(MAX_LEVEL * 100 + 99_999) == MAX_LEVEL


def test_level_monotone_non_decreasing():
    levels = [compute_level(p) for p in range(0, 1_000, 7)]
    assert levels == sorted(levels)
