"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径等可配置项，以及不可覆盖的等级计算常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKLEDGER_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKLEDGER_DB_PATH",
        str(_get_base_dir() / "sqlite" / "taskledger.db"),
    )


# 每升一级所需积分（等级曲线固定，不提供环境变量覆盖）
POINTS_PER_LEVEL: int = 100

# 等级上限
MAX_LEVEL: int = 255

# 查询边界上表示"无身份"的哨兵值（仅用于对外输出 assignee）
NO_IDENTITY: str = ""

# 积分上限（SQLite INTEGER 为 64 位有符号整数）
MAX_POINTS: int = 2**63 - 1
