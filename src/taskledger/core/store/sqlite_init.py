"""SQLite 数据库初始化

PRAGMA 配置 + 表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# tasks 表 DDL（status 以数值编码存储：0=PENDING, 1=COMPLETED, 2=CANCELLED）
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id        INTEGER PRIMARY KEY,
    title          TEXT NOT NULL DEFAULT '',
    description    TEXT NOT NULL DEFAULT '',
    reward_points  INTEGER NOT NULL CHECK (reward_points > 0),
    status         INTEGER NOT NULL DEFAULT 0 CHECK (status IN (0, 1, 2)),
    creator        TEXT NOT NULL,
    assignee       TEXT,
    created_at     TEXT NOT NULL,
    updated_at     TEXT NOT NULL
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_assignee ON tasks(assignee);",
]

# registry 表只有一行，task_count 即下一个待分配的 task_id
_REGISTRY_DDL = """
CREATE TABLE IF NOT EXISTS registry (
    id          INTEGER PRIMARY KEY CHECK (id = 1),
    task_count  INTEGER NOT NULL DEFAULT 0
);
"""

_REGISTRY_SEED = "INSERT OR IGNORE INTO registry (id, task_count) VALUES (1, 0);"

# user_progress 表 DDL
_PROGRESS_DDL = """
CREATE TABLE IF NOT EXISTS user_progress (
    profile_id       TEXT PRIMARY KEY,
    owner            TEXT NOT NULL,
    tasks_completed  INTEGER NOT NULL DEFAULT 0,
    points_earned    INTEGER NOT NULL DEFAULT 0,
    level            INTEGER NOT NULL DEFAULT 0 CHECK (level BETWEEN 0 AND 255),
    created_at       TEXT NOT NULL,
    updated_at       TEXT NOT NULL
);
"""

_PROGRESS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_user_progress_owner ON user_progress(owner);",
]

# events 表 DDL（append-only）
_EVENTS_DDL = """
CREATE TABLE IF NOT EXISTS events (
    seq       INTEGER PRIMARY KEY,
    event_id  TEXT NOT NULL UNIQUE,
    ts        TEXT NOT NULL,
    type      TEXT NOT NULL,
    task_id   INTEGER,
    actor     TEXT NOT NULL,
    payload   TEXT NOT NULL DEFAULT '{}'
);
"""

_EVENTS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_events_task_id ON events(task_id, seq);",
    "CREATE INDEX IF NOT EXISTS idx_events_type ON events(type);",
]

# capabilities 表：唯一的管理员凭证（仅保存 token hash）
_CAPABILITIES_DDL = """
CREATE TABLE IF NOT EXISTS capabilities (
    id          INTEGER PRIMARY KEY CHECK (id = 1),
    token_hash  TEXT NOT NULL,
    holder      TEXT NOT NULL,
    minted_at   TEXT NOT NULL
);
"""


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 创建表
    await conn.execute(_TASKS_DDL)
    await conn.execute(_REGISTRY_DDL)
    await conn.execute(_PROGRESS_DDL)
    await conn.execute(_EVENTS_DDL)
    await conn.execute(_CAPABILITIES_DDL)
    await conn.execute(_REGISTRY_SEED)

    # 创建索引
    for idx_sql in _TASKS_INDEXES + _PROGRESS_INDEXES + _EVENTS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
